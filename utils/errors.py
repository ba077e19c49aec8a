"""Error taxonomy for the authentication subsystem.

Every error is a werkzeug ``HTTPException`` so it can be raised anywhere in a
request and rendered by the application's JSON error handler. ``code_name``
is the stable, machine-readable identifier clients may branch on.
"""

from __future__ import annotations

from werkzeug import exceptions


class ValidationError(exceptions.BadRequest):
    """Missing or malformed input."""

    code_name = "ValidationError"


class DuplicateEmail(exceptions.BadRequest):
    """A user with the (normalized) email already exists."""

    code_name = "DuplicateEmail"
    description = "A user with that email already exists."


class InvalidCredentials(exceptions.Unauthorized):
    """Login failed. Deliberately does not say why."""

    code_name = "InvalidCredentials"
    description = "Invalid email or password."


class Unauthenticated(exceptions.Unauthorized):
    """No usable bearer token was presented."""

    code_name = "Unauthenticated"
    description = "Authentication required."


class MalformedToken(Unauthenticated):
    """The bearer token could not be decoded."""

    code_name = "MalformedToken"
    description = "Invalid or malformed token."


class UnknownSubject(exceptions.NotFound):
    """The token decoded to a user id that does not exist."""

    code_name = "UnknownSubject"
    description = "User not found."


class Forbidden(exceptions.Forbidden):
    """Role policy violation."""

    code_name = "Forbidden"


class InternalError(exceptions.InternalServerError):
    """Store or hashing failure."""

    code_name = "InternalError"
    description = "An internal error occurred."
