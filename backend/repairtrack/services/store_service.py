# Overview: Store creation and password-only login resolution.

from __future__ import annotations

import hmac
from dataclasses import dataclass

from ..errors import AuthenticationError
from ..models import Store
from ..repositories.base import OrderRepository
from ..validation import require_text
from .auth_service import hash_password, verify_password


ROLE_STORE = "store"
ROLE_HUB = "hub"

MIN_STORE_NAME_LENGTH = 3


@dataclass(frozen=True)
class Identity:
    """Resolved login: the hub, or one store."""
    role: str
    store_id: int | None = None
    store_name: str | None = None

    @property
    def is_hub(self) -> bool:
        return self.role == ROLE_HUB

    def to_dict(self) -> dict:
        return {"role": self.role, "store_id": self.store_id, "store_name": self.store_name}


def _constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def create_store(
    repository: OrderRepository,
    *,
    name,
    password: str,
    admin_password: str,
    expected_admin_password: str,
    rounds: int = 12,
) -> Store:
    """
    Create a store. Guarded by the admin password; the store password is
    bcrypt-hashed before it reaches the repository.
    """
    if not admin_password or not _constant_time_equals(admin_password, expected_admin_password):
        raise AuthenticationError("Invalid admin password")

    name = require_text(name, "name", min_length=MIN_STORE_NAME_LENGTH, max_length=120)
    return repository.create_store(name, hash_password(password, rounds=rounds))


def list_stores(repository: OrderRepository) -> list[Store]:
    return repository.get_stores()


def authenticate(repository: OrderRepository, password: str, *, hub_password: str) -> Identity:
    """
    Resolve a password to the hub or to the store whose hash matches.

    There is no username, so every store hash is checked. The hub password
    is compared last.
    """
    if not password:
        raise AuthenticationError("Password is required")

    for store in repository.get_stores():
        if verify_password(password, store.password_hash):
            return Identity(role=ROLE_STORE, store_id=store.id, store_name=store.name)

    if hub_password and _constant_time_equals(password, hub_password):
        return Identity(role=ROLE_HUB)

    raise AuthenticationError("Invalid password")
