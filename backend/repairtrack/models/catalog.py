from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Complaint(db.Model):
    """Hub-routed repair offered at intake, with its default price."""
    __tablename__ = "complaints"
    __table_args__ = (
        db.CheckConstraint("default_price >= 0", name="ck_complaints_price_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    default_price = db.Column(db.Float, nullable=False, default=0.0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Complaint id={self.id} description={self.description!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "default_price": self.default_price,
            "created_at": to_utc_z(self.created_at),
        }


class InHousePreset(db.Model):
    """
    Repair done at the store itself. Presets chosen at intake are folded into
    the order's custom_complaint text, not linked.
    """
    __tablename__ = "in_house_presets"
    __table_args__ = (
        db.CheckConstraint("default_price >= 0", name="ck_in_house_presets_price_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    default_price = db.Column(db.Float, nullable=False, default=0.0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<InHousePreset id={self.id} description={self.description!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "default_price": self.default_price,
            "created_at": to_utc_z(self.created_at),
        }
