"""SQLAlchemy-backed credential store."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import User, normalize_email
from utils.errors import DuplicateEmail, InternalError, UnknownSubject

from .abstract_storage import AbstractCredentialStore

EXTENSION_KEY = "credential_store"

# API field name -> sortable/filterable column.
QUERY_COLUMNS = {
    "id": User.id,
    "email": User.email,
    "name": User.name,
    "phone": User.phone,
    "role": User.role,
    "createdAt": User.created_at,
}


class CredentialStore(AbstractCredentialStore):
    """Persist users through Flask-SQLAlchemy with a single writer lock.

    Every mutation runs under ``_write_lock`` so that computing the next id and
    inserting the row happen as one step. The lock is re-entrant so callers
    that need a multi-step sequence (bootstrap, admin reset) can hold it via
    :meth:`locked` and still call the mutating methods.
    """

    def __init__(self, database: SQLAlchemy):
        self._db = database
        self._write_lock = threading.RLock()

    def init_app(self, app: Flask) -> None:
        app.extensions[EXTENSION_KEY] = self

    @contextmanager
    def locked(self) -> Iterator["CredentialStore"]:
        """Hold the writer lock for the duration of the block."""

        with self._write_lock:
            yield self

    # Reads

    def find_by_email(self, email: str | None) -> User | None:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return User.query.filter(func.lower(User.email) == normalized).first()

    def find_by_id(self, user_id: int) -> User | None:
        try:
            key = int(user_id)
        except (TypeError, ValueError):
            return None
        return self._db.session.get(User, key)

    def list_all(self) -> Sequence[User]:
        return User.query.order_by(User.id.asc()).all()

    def query(
        self,
        *,
        filters: dict[str, str] | None = None,
        search: str | None = None,
        sort: str | None = None,
        order: str = "asc",
        page: int | None = None,
        limit: int | None = None,
    ) -> list[User]:
        """Filter, search, sort and paginate users for the resource router."""

        query = User.query
        for field, value in (filters or {}).items():
            column = QUERY_COLUMNS.get(field)
            if column is None:
                continue
            if field == "id":
                try:
                    query = query.filter(column == int(value))
                except ValueError:
                    return []
            elif field == "email":
                query = query.filter(func.lower(column) == normalize_email(value))
            else:
                query = query.filter(column == value)

        if search:
            like = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(User.name).like(like),
                    func.lower(User.email).like(like),
                )
            )

        sort_column = QUERY_COLUMNS.get(sort or "id", User.id)
        if (order or "asc").lower() == "desc":
            query = query.order_by(sort_column.desc())
        else:
            query = query.order_by(sort_column.asc())

        if limit is not None:
            query = query.limit(limit)
            if page is not None and page > 1:
                query = query.offset((page - 1) * limit)

        return query.all()

    # Writes

    def next_id(self) -> int:
        """Return max(id) + 1, or 1 for an empty store. Call under the lock."""

        current = self._db.session.query(func.max(User.id)).scalar()
        return (current or 0) + 1

    def insert(self, user: User) -> User:
        with self._write_lock:
            user.email = normalize_email(user.email)
            if self.find_by_email(user.email) is not None:
                raise DuplicateEmail()
            if user.id is None:
                user.id = self.next_id()
            self._db.session.add(user)
            self._commit()
            current_app.logger.info("Stored user %s (%s)", user.id, user.email)
            return user

    def update(self, user_id: int, fields: dict[str, Any]) -> User:
        with self._write_lock:
            user = self.find_by_id(user_id)
            if user is None:
                raise UnknownSubject()

            if "email" in fields:
                email = normalize_email(fields["email"])
                holder = self.find_by_email(email)
                if holder is not None and holder.id != user.id:
                    raise DuplicateEmail()
                fields = {**fields, "email": email}

            for column, value in fields.items():
                setattr(user, column, value)
            self._commit()
            return user

    def remove(self, email: str) -> bool:
        with self._write_lock:
            user = self.find_by_email(email)
            if user is None:
                return False
            user_id, user_email = user.id, user.email
            self._db.session.delete(user)
            self._commit()
            current_app.logger.info("Removed user %s (%s)", user_id, user_email)
            return True

    def replace(self, email: str, user: User) -> User:
        """Swap the user holding ``email`` for ``user`` in a single commit.

        On failure nothing changes: the old record is only gone once the new
        one is stored.
        """

        with self._write_lock:
            session = self._db.session
            existing = self.find_by_email(email)
            if existing is not None:
                session.delete(existing)
                # The delete must reach the database before the insert reuses its email and id.
                session.flush()

            user.email = normalize_email(user.email)
            if user.id is None:
                user.id = self.next_id()
            session.add(user)
            self._commit()
            current_app.logger.info("Replaced user %s (%s)", user.id, user.email)
            return user

    def _commit(self) -> None:
        session = self._db.session
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if "email" in str(exc.orig).lower():
                raise DuplicateEmail() from exc
            current_app.logger.exception("Credential store integrity failure")
            raise InternalError() from exc
        except SQLAlchemyError as exc:
            session.rollback()
            current_app.logger.exception("Credential store write failed")
            raise InternalError() from exc


def get_credential_store() -> CredentialStore:
    """Return the store registered on the current application."""

    return current_app.extensions[EXTENSION_KEY]
