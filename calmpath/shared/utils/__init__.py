"""Shared utilities for CalmPath."""
from .pii import hash_pii, hash_text_for_audit, configure_pii_salt, require_pii_salt

__all__ = ["hash_pii", "hash_text_for_audit", "configure_pii_salt", "require_pii_salt"]
