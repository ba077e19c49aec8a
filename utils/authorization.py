"""Role policy applied to writes on the user collection."""

from __future__ import annotations

from flask import current_app, request

from models.user import DEFAULT_ROLE, User, normalize_email
from storage import get_credential_store
from utils.errors import Forbidden
from utils.tokens import bearer_token_from_request, resolve_token

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
USER_COLLECTION_BLUEPRINTS = frozenset({"users", "api_users"})


def is_super_admin(user: User | None) -> bool:
    if user is None:
        return False
    return user.is_super_admin(current_app.config["SUPER_ADMIN_EMAIL"])


def is_reserved_email(email: str | None) -> bool:
    """The super-admin address may only be held by the seeded account."""

    return normalize_email(email) == normalize_email(
        current_app.config["SUPER_ADMIN_EMAIL"]
    )


def resolve_caller() -> User | None:
    """Return the user behind the request's bearer token, or None.

    Missing, malformed and unknown tokens all resolve to None, as does any
    failure while decoding, so privileged checks fail closed.
    """

    token = bearer_token_from_request()
    if token is None:
        return None
    try:
        return resolve_token(token, get_credential_store())
    except Exception:
        current_app.logger.debug("Bearer token did not resolve to a user")
        return None


def _requested_role() -> object | None:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None
    return payload.get("role")


def authorize_user_writes() -> None:
    """Before-request hook guarding privileged writes on the user collection.

    Only deletes and role elevation are gated; every other request continues
    to the router unchanged.
    """

    if request.method not in WRITE_METHODS:
        return None
    if request.blueprint not in USER_COLLECTION_BLUEPRINTS:
        return None

    if request.method == "DELETE":
        action = "delete users"
    else:
        role = _requested_role()
        if role is None or role == DEFAULT_ROLE:
            return None
        action = "assign roles"

    caller = resolve_caller()
    if is_super_admin(caller):
        return None

    current_app.logger.warning(
        "Blocked %s %s: caller %s may not %s",
        request.method,
        request.path,
        caller.id if caller is not None else "anonymous",
        action,
    )
    raise Forbidden(f"Only the super-admin may {action}.")
