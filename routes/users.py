"""Resource routes for the user collection.

Privileged writes (deletes, role assignment) are gated before these views run
by :func:`utils.authorization.authorize_user_writes`.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import NotFound

from models.user import DEFAULT_ROLE, PROFILE_FIELDS, ROLES, User, normalize_email
from storage import get_credential_store
from utils.authorization import is_reserved_email, is_super_admin, resolve_caller
from utils.errors import DuplicateEmail, Forbidden, Unauthenticated, ValidationError
from utils.passwords import hash_password, validate_password
from utils.request_validation import optional_string, parse_json_request, validate_name

users_bp = Blueprint("users", __name__)

FILTER_FIELDS = ("id", "email", "name", "phone", "role")


def _serialize(user: User) -> dict:
    return user.to_dict(current_app.config["SUPER_ADMIN_EMAIL"])


def _get_user_or_404(user_id: int) -> User:
    user = get_credential_store().find_by_id(user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


def _parse_positive_int(value: str | None, field: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        parsed = int(value)
    except ValueError:
        raise ValidationError(f"{field} must be an integer.") from None
    if parsed < 1:
        raise ValidationError(f"{field} must be positive.")
    return parsed


def _parse_role(raw_role: object) -> str:
    if raw_role is None or raw_role == "":
        return DEFAULT_ROLE
    role = raw_role.strip().lower() if isinstance(raw_role, str) else ""
    if role not in ROLES:
        raise ValidationError("Role must be one of: {}.".format(", ".join(ROLES)))
    return role


def _collect_fields(payload: dict) -> dict[str, object]:
    """Translate a request body into column updates."""

    config = current_app.config
    fields: dict[str, object] = {}
    for key, value in payload.items():
        if key not in PROFILE_FIELDS:
            continue
        if key == "name":
            value = validate_name(value, config["MIN_NAME_LENGTH"])
        elif key == "email":
            value = normalize_email(value if isinstance(value, str) else None)
            if not value:
                raise ValidationError("Email must not be empty.")
        else:
            value = optional_string(value, key)
        fields[PROFILE_FIELDS[key]] = value

    if "role" in payload:
        fields["role"] = _parse_role(payload["role"])

    password = payload.get("password")
    if password:
        if not isinstance(password, str):
            raise ValidationError("Password must be a string.")
        validate_password(password, config["MIN_PASSWORD_LENGTH"])
        fields["password_hash"] = hash_password(password, config["PASSWORD_HASH_COST"])
    return fields


@users_bp.route("", methods=["GET"])
def list_users():
    """Return users with optional json-server style filters."""

    args = request.args
    filters = {field: args[field] for field in FILTER_FIELDS if args.get(field)}
    users = get_credential_store().query(
        filters=filters,
        search=args.get("q"),
        sort=args.get("_sort"),
        order=args.get("_order", "asc"),
        page=_parse_positive_int(args.get("_page"), "_page"),
        limit=_parse_positive_int(args.get("_limit"), "_limit"),
    )
    return jsonify([_serialize(user) for user in users])


@users_bp.route("/<int:user_id>", methods=["GET"])
def get_user(user_id: int):
    return jsonify(_serialize(_get_user_or_404(user_id)))


@users_bp.route("", methods=["POST"])
def create_user():
    """Create a user record directly in the collection."""

    payload = parse_json_request(request, required_keys=("email", "password", "name"))
    fields = _collect_fields(payload)
    if "password_hash" not in fields:
        raise ValidationError("Password is required.")

    email = fields["email"]
    store = get_credential_store()
    if is_reserved_email(email) or store.find_by_email(email) is not None:
        raise DuplicateEmail()

    user = store.insert(
        User(
            email=email,
            name=fields["name"],
            phone=fields.get("phone"),
            image=fields.get("image"),
            profile_picture=fields.get("profile_picture"),
            address=fields.get("address"),
            role=fields.get("role", DEFAULT_ROLE),
            password_hash=fields["password_hash"],
        )
    )
    return jsonify(_serialize(user)), HTTPStatus.CREATED


@users_bp.route("/<int:user_id>", methods=["PUT", "PATCH"])
def update_user(user_id: int):
    """Update a user. Only the record's owner or the super-admin may write."""

    caller = resolve_caller()
    if caller is None:
        raise Unauthenticated()
    target = _get_user_or_404(user_id)
    if caller.id != target.id and not is_super_admin(caller):
        raise Forbidden("You may only modify your own account.")

    payload = parse_json_request(request, allow_empty=True)
    fields = _collect_fields(payload)
    email = fields.get("email")
    if email and email != target.email:
        if is_super_admin(target):
            raise ValidationError("The super-admin email cannot be changed.")
        if is_reserved_email(email):
            raise DuplicateEmail()

    if fields:
        target = get_credential_store().update(target.id, fields)
    return jsonify(_serialize(target))


@users_bp.route("/<int:user_id>", methods=["DELETE"])
def delete_user(user_id: int):
    """Hard-delete a user."""

    target = _get_user_or_404(user_id)
    if is_super_admin(target):
        raise ValidationError("The super-admin account cannot be deleted.")

    get_credential_store().remove(target.email)
    return jsonify({"success": True, "id": user_id})
