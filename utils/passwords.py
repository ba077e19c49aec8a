"""Password hashing helpers built on werkzeug.security."""

from __future__ import annotations

from functools import lru_cache

from werkzeug.security import check_password_hash, generate_password_hash

from utils.errors import ValidationError

DEFAULT_COST = 10
MIN_COST = 1
# PBKDF2-SHA256 iterations per unit of 2**cost; cost 10 is roughly 614k rounds.
ITERATIONS_PER_COST_UNIT = 600


def _method_for_cost(cost: int) -> str:
    cost = max(MIN_COST, int(cost))
    return f"pbkdf2:sha256:{ITERATIONS_PER_COST_UNIT * 2 ** cost}"


def validate_password(password: str | None, min_length: int = 6) -> str:
    """Return the password or raise ``ValidationError`` if it is missing or short."""

    if not password:
        raise ValidationError("Password is required.")
    if not isinstance(password, str):
        raise ValidationError("Password must be a string.")
    if len(password) < min_length:
        raise ValidationError(
            f"Password must be at least {min_length} characters long."
        )
    return password


def hash_password(password: str, cost: int = DEFAULT_COST) -> str:
    """Hash a plaintext password with a per-call random salt."""

    return generate_password_hash(password, method=_method_for_cost(cost))


def verify_password(password: str | None, password_hash: str | None) -> bool:
    """Check a plaintext password against a stored hash in constant time."""

    if not password or not password_hash:
        return False
    if not isinstance(password, str):
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        return False


@lru_cache(maxsize=None)
def dummy_hash(cost: int = DEFAULT_COST) -> str:
    """Return a throwaway hash at ``cost`` for verifying against unknown accounts."""

    return hash_password("not-a-real-password", cost)
