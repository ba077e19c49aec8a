"""Storage backends."""

from .abstract_storage import AbstractCredentialStore
from .credential_store import CredentialStore, get_credential_store

__all__ = ["AbstractCredentialStore", "CredentialStore", "get_credential_store"]
