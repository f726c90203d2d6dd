"""Application-level constants shared across modules."""
from __future__ import annotations

USERS_COLLECTION = "users"
FILES_COLLECTION = "files"
