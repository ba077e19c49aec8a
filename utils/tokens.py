"""Bearer token issuance and validation.

Two codecs share one interface. ``LegacyTokenCodec`` produces the storefront's
``token_<userId>_<issuedAtMillis>`` strings: they carry no signature
and never expire, so anything matching the format authenticates as the
encoded id. ``SignedTokenCodec`` issues signed, expiring JWTs through
Flask-JWT-Extended and is selected with ``TOKEN_SCHEME = "jwt"``.

Decoding always yields :class:`TokenClaims` or raises :class:`MalformedToken`.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from flask import current_app, request
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import ExpiredSignatureError, PyJWTError

from models.user import User
from storage.abstract_storage import AbstractCredentialStore
from utils.errors import MalformedToken, UnknownSubject

LEGACY_TOKEN_PATTERN = re.compile(r"^token_([0-9]{1,18})_([0-9]{1,18})$")


@dataclass(frozen=True)
class TokenClaims:
    """Decoded token contents."""

    subject_id: int
    issued_at: datetime


class LegacyTokenCodec:
    """Unsigned ``token_<id>_<millis>`` tokens."""

    name = "legacy"

    def encode(self, user_id: int) -> str:
        issued_at_ms = int(time.time() * 1000)
        return f"token_{int(user_id)}_{issued_at_ms}"

    def decode(self, token: str) -> TokenClaims:
        match = LEGACY_TOKEN_PATTERN.fullmatch(token or "")
        if match is None:
            raise MalformedToken()
        try:
            issued_at = datetime.fromtimestamp(
                int(match.group(2)) / 1000, tz=timezone.utc
            )
        except (OverflowError, OSError, ValueError) as exc:
            raise MalformedToken() from exc
        return TokenClaims(subject_id=int(match.group(1)), issued_at=issued_at)


class SignedTokenCodec:
    """Signed, expiring JWTs keyed by ``JWT_SECRET_KEY``."""

    name = "jwt"

    def encode(self, user_id: int) -> str:
        return create_access_token(identity=str(user_id))

    def decode(self, token: str) -> TokenClaims:
        try:
            claims = decode_token(token)
        except ExpiredSignatureError as exc:
            raise MalformedToken("Token has expired.") from exc
        except (PyJWTError, JWTExtendedException) as exc:
            raise MalformedToken() from exc

        try:
            subject_id = int(claims["sub"])
            issued_at = datetime.fromtimestamp(int(claims["iat"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedToken() from exc
        return TokenClaims(subject_id=subject_id, issued_at=issued_at)


_CODECS = {
    LegacyTokenCodec.name: LegacyTokenCodec,
    SignedTokenCodec.name: SignedTokenCodec,
}


def get_token_codec() -> LegacyTokenCodec | SignedTokenCodec:
    """Return the codec selected by ``TOKEN_SCHEME``."""

    scheme = current_app.config.get("TOKEN_SCHEME", LegacyTokenCodec.name)
    try:
        return _CODECS[scheme]()
    except KeyError:
        raise ValueError(f"Unknown TOKEN_SCHEME: {scheme!r}") from None


def issue_token(user: User) -> str:
    return get_token_codec().encode(user.id)


def resolve_token(token: str, store: AbstractCredentialStore) -> User:
    """Decode ``token`` and load its subject, or raise the matching auth error."""

    claims = get_token_codec().decode(token)
    user = store.find_by_id(claims.subject_id)
    if user is None:
        raise UnknownSubject()
    return user


def bearer_token_from_request() -> str | None:
    """Return the token from ``Authorization: Bearer <token>``, if present."""

    header = request.headers.get("Authorization", "")
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None
