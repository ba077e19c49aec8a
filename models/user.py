"""User model definition."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from . import db


ROLES = ("customer", "admin", "manager")
DEFAULT_ROLE = "customer"
ADMIN_ROLES = frozenset({"admin", "manager"})

# API field name -> column name for the mutable profile fields.
PROFILE_FIELDS = {
    "email": "email",
    "name": "name",
    "phone": "phone",
    "image": "image",
    "profilePicture": "profile_picture",
    "address": "address",
}


def normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


class User(db.Model):
    """Represents a storefront account."""

    __tablename__ = "users"

    # Ids are assigned by the credential store (max + 1), never by the database.
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(64), nullable=True)
    role = db.Column(db.String(32), nullable=False, default=DEFAULT_ROLE)
    image = db.Column(db.String(512), nullable=True)
    profile_picture = db.Column(db.String(512), nullable=True)
    address = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def is_super_admin(self, super_admin_email: str) -> bool:
        """Return True when this account holds the configured super-admin email."""

        return bool(self.email) and self.email == normalize_email(super_admin_email)

    def to_dict(self, super_admin_email: str) -> dict[str, Any]:
        """Return the client-safe projection. Never includes the password hash."""

        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role,
            "image": self.image,
            "profilePicture": self.profile_picture,
            "address": self.address,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "isAdmin": self.is_admin,
            "isSuperAdmin": self.is_super_admin(super_admin_email),
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.id} {self.email}>"
