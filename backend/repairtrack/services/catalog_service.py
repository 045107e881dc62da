# Overview: Complaint and in-house preset catalogs managed from store settings.

from __future__ import annotations

from ..errors import ValidationError
from ..repositories.base import OrderRepository
from ..validation import coerce_amount, require_text


CATALOG_COMPLAINTS = "complaints"
CATALOG_PRESETS = "presets"

# Seeded by `flask system init`
DEFAULT_COMPLAINTS = [
    ("Heel Replacement", 450.0),
    ("Sole Pasting", 250.0),
    ("Full Polish", 150.0),
    ("Stitching", 100.0),
    ("Patch Work", 300.0),
]


def _validate(description, default_price) -> tuple[str, float]:
    return (
        require_text(description, "description", max_length=255),
        coerce_amount(default_price, "default_price"),
    )


def list_entries(repository: OrderRepository, catalog: str) -> list:
    if catalog == CATALOG_COMPLAINTS:
        return repository.get_complaints()
    if catalog == CATALOG_PRESETS:
        return repository.get_in_house_presets()
    raise ValidationError(f"Unknown catalog '{catalog}'")


def add_entry(repository: OrderRepository, catalog: str, description, default_price):
    description, price = _validate(description, default_price)
    if catalog == CATALOG_COMPLAINTS:
        return repository.add_complaint(description, price)
    if catalog == CATALOG_PRESETS:
        return repository.add_in_house_preset(description, price)
    raise ValidationError(f"Unknown catalog '{catalog}'")


def delete_entry(repository: OrderRepository, catalog: str, entry_id: int) -> bool:
    """
    Remove a catalog entry. Orders keep their own snapshot of the complaints
    chosen at intake, so nothing else changes.
    """
    if catalog == CATALOG_COMPLAINTS:
        return repository.delete_complaint(entry_id)
    if catalog == CATALOG_PRESETS:
        return repository.delete_in_house_preset(entry_id)
    raise ValidationError(f"Unknown catalog '{catalog}'")


def seed_default_complaints(repository: OrderRepository) -> int:
    """Add the default complaints that are missing. Returns how many were added."""
    existing = {c.description.lower() for c in repository.get_complaints()}
    added = 0
    for description, price in DEFAULT_COMPLAINTS:
        if description.lower() in existing:
            continue
        repository.add_complaint(description, price)
        added += 1
    return added
