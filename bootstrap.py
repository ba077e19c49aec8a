"""Super-admin bootstrap and emergency reset.

Both routines run inside an application context and hold the credential
store's writer lock for their whole sequence, so they cannot interleave with
an in-flight registration of the same email.
"""

from __future__ import annotations

from flask import current_app

from models import db
from models.user import User, normalize_email
from storage import get_credential_store
from utils.passwords import hash_password

SUPER_ADMIN_ROLE = "admin"


def _build_super_admin() -> User:
    config = current_app.config
    store = get_credential_store()

    user = User(
        email=normalize_email(config["SUPER_ADMIN_EMAIL"]),
        name=config["SUPER_ADMIN_NAME"],
        phone=config.get("SUPER_ADMIN_PHONE"),
        role=SUPER_ADMIN_ROLE,
        password_hash=hash_password(
            config["SUPER_ADMIN_PASSWORD"], config["PASSWORD_HASH_COST"]
        ),
    )
    preferred_id = config.get("SUPER_ADMIN_ID")
    if preferred_id is not None and store.find_by_id(preferred_id) is None:
        user.id = int(preferred_id)
    return user


def ensure_super_admin() -> User:
    """Create the users table and super-admin if missing; never modify an existing one."""

    store = get_credential_store()
    with store.locked():
        db.create_all()

        existing = store.find_by_email(current_app.config["SUPER_ADMIN_EMAIL"])
        if existing is not None:
            current_app.logger.info(
                "Super-admin already exists (id=%s)", existing.id
            )
            return existing

        user = store.insert(_build_super_admin())
        current_app.logger.info(
            "Seeded super-admin %s (id=%s)", user.email, user.id
        )
        return user


def reset_super_admin() -> dict[str, str]:
    """Remove and recreate the super-admin with the configured default password."""

    store = get_credential_store()
    config = current_app.config
    with store.locked():
        db.create_all()
        existing = store.find_by_email(config["SUPER_ADMIN_EMAIL"])
        replacement = _build_super_admin()
        if existing is not None and replacement.id is None:
            replacement.id = existing.id
        user = store.replace(config["SUPER_ADMIN_EMAIL"], replacement)

    current_app.logger.warning(
        "Super-admin %s was reset to the default password (id=%s)",
        user.email,
        user.id,
    )
    return {"email": user.email, "password": config["SUPER_ADMIN_PASSWORD"]}
