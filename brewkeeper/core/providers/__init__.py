"""Datastore providers — where recorded package state lives."""

from brewkeeper.core.providers.base import DatastoreProvider
from brewkeeper.core.providers.factory import create_provider
from brewkeeper.core.providers.json_file import JsonFileProvider
from brewkeeper.core.providers.memory import InMemoryProvider

__all__ = [
    "DatastoreProvider",
    "InMemoryProvider",
    "JsonFileProvider",
    "create_provider",
]
