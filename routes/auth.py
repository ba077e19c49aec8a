"""Authentication blueprint providing login, register and profile endpoints."""

from __future__ import annotations

import hmac
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import NotFound

from bootstrap import reset_super_admin
from models.user import DEFAULT_ROLE, PROFILE_FIELDS, ROLES, User, normalize_email
from storage import get_credential_store
from utils.authorization import is_reserved_email, is_super_admin, resolve_caller
from utils.errors import (
    DuplicateEmail,
    Forbidden,
    InvalidCredentials,
    Unauthenticated,
    ValidationError,
)
from utils.passwords import dummy_hash, hash_password, validate_password, verify_password
from utils.request_validation import optional_string, parse_json_request, validate_name
from utils.tokens import bearer_token_from_request, issue_token, resolve_token

auth_bp = Blueprint("auth", __name__)

# Never writable through the self-service profile path.
PROTECTED_PROFILE_FIELDS = frozenset(
    {"id", "role", "createdAt", "passwordHash", "isAdmin", "isSuperAdmin"}
)


def _serialize(user: User) -> dict:
    return user.to_dict(current_app.config["SUPER_ADMIN_EMAIL"])


def _hash(password: str) -> str:
    return hash_password(password, current_app.config["PASSWORD_HASH_COST"])


def _extract_role(raw_role: object) -> str:
    """Return the requested role, honoring it only for the super-admin."""

    if raw_role is None or raw_role == "" or raw_role == DEFAULT_ROLE:
        return DEFAULT_ROLE

    caller = resolve_caller()
    if not is_super_admin(caller):
        current_app.logger.warning(
            "Ignoring role %r requested by %s during registration",
            raw_role,
            caller.id if caller is not None else "anonymous",
        )
        return DEFAULT_ROLE

    role = raw_role.strip().lower() if isinstance(raw_role, str) else ""
    if role not in ROLES:
        raise ValidationError("Role must be one of: {}.".format(", ".join(ROLES)))
    return role


def _read_credentials(payload: dict) -> tuple[str, str]:
    """Return the normalized email and raw password, both required strings."""

    email = payload.get("email")
    password = payload.get("password")
    if not email or not password:
        raise ValidationError("Email and password are required.")
    if not isinstance(email, str) or not isinstance(password, str):
        raise ValidationError("Email and password must be strings.")

    email = normalize_email(email)
    if not email:
        raise ValidationError("Email and password are required.")
    return email, password


def _require_profile_user() -> User:
    token = bearer_token_from_request()
    if token is None:
        raise Unauthenticated()
    return resolve_token(token, get_credential_store())


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a bearer token."""

    payload = parse_json_request(request, allow_empty=True)
    email, password = _read_credentials(payload)

    user = get_credential_store().find_by_email(email)
    if user is None:
        # Same hashing cost as a real check, so timing does not reveal unknown emails.
        verify_password(password, dummy_hash(current_app.config["PASSWORD_HASH_COST"]))
    if user is None or not verify_password(password, user.password_hash):
        current_app.logger.info("Failed login for %s", email)
        raise InvalidCredentials()

    return (
        jsonify(
            {
                "success": True,
                "accessToken": issue_token(user),
                "user": _serialize(user),
            }
        ),
        HTTPStatus.OK,
    )


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a customer account (or any role, when the super-admin asks)."""

    config = current_app.config
    payload = parse_json_request(request)
    email, password = _read_credentials(payload)
    name = validate_name(payload.get("name"), config["MIN_NAME_LENGTH"])
    validate_password(password, config["MIN_PASSWORD_LENGTH"])
    phone = optional_string(payload.get("phone"), "phone")
    role = _extract_role(payload.get("role"))

    store = get_credential_store()
    if is_reserved_email(email) or store.find_by_email(email) is not None:
        raise DuplicateEmail()

    user = store.insert(
        User(
            email=email,
            name=name,
            phone=phone,
            role=role,
            password_hash=_hash(password),
        )
    )

    return (
        jsonify(
            {
                "success": True,
                "accessToken": issue_token(user),
                "user": _serialize(user),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/profile", methods=["GET"])
def get_profile() -> tuple:
    """Return the caller's sanitized profile."""

    user = _require_profile_user()
    return jsonify(_serialize(user)), HTTPStatus.OK


@auth_bp.route("/profile", methods=["PATCH", "PUT"])
def update_profile() -> tuple:
    """Update the caller's profile. ``id`` and ``role`` are silently ignored."""

    config = current_app.config
    user = _require_profile_user()
    payload = parse_json_request(request, allow_empty=True)

    fields: dict[str, object] = {}
    for key, value in payload.items():
        if key in PROTECTED_PROFILE_FIELDS or key not in PROFILE_FIELDS:
            continue
        if key == "name":
            value = validate_name(value, config["MIN_NAME_LENGTH"])
        elif key == "email":
            value = normalize_email(value if isinstance(value, str) else None)
            if not value:
                raise ValidationError("Email must not be empty.")
            if is_super_admin(user) and value != user.email:
                raise ValidationError("The super-admin email cannot be changed.")
            if is_reserved_email(value) and not is_super_admin(user):
                raise DuplicateEmail()
        else:
            value = optional_string(value, key)
        fields[PROFILE_FIELDS[key]] = value

    password = payload.get("password")
    if password:
        if not isinstance(password, str):
            raise ValidationError("Password must be a string.")
        validate_password(password, config["MIN_PASSWORD_LENGTH"])
        fields["password_hash"] = _hash(password)

    if fields:
        user = get_credential_store().update(user.id, fields)

    return jsonify({"success": True, "user": _serialize(user)}), HTTPStatus.OK


@auth_bp.route("/reset-super-admin", methods=["POST"])
def reset_super_admin_account() -> tuple:
    """Recreate the super-admin with the default password (feature-flagged)."""

    config = current_app.config
    if not config.get("ENABLE_SUPER_ADMIN_RESET"):
        raise NotFound()

    secret = config.get("SUPER_ADMIN_RESET_SECRET")
    if secret:
        supplied = request.headers.get("X-Reset-Secret", "")
        if not hmac.compare_digest(supplied.encode(), secret.encode()):
            raise Forbidden("Invalid reset secret.")

    credentials = reset_super_admin()
    return jsonify({"success": True, "credentials": credentials}), HTTPStatus.OK
