"""Persistence collaborators: map document store and JSON export."""

from .export import JsonFileExporter
from .store import MapDocumentStore, floor_key

__all__ = [
    "JsonFileExporter",
    "MapDocumentStore",
    "floor_key",
]
