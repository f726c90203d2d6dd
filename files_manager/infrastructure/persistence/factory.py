"""Document store factory. Only place that imports the concrete document store client."""
from __future__ import annotations

from files_manager.config.settings import Settings
from files_manager.infrastructure.persistence.mongo.db_client import DBClient
from files_manager.ports.document_store import DocumentStore


def create_document_store(settings: Settings) -> DocumentStore:
    return DBClient(settings)
