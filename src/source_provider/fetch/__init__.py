"""Workspace cache and the clients sources are fetched with."""

from source_provider.fetch.git import GitClient, GitCommandError
from source_provider.fetch.http import HttpRegistryClient, RegistryNotFoundError
from source_provider.fetch.protocols import RegistryClient, VcsClient
from source_provider.fetch.workspace import Workspace

__all__ = [
    "GitClient",
    "GitCommandError",
    "HttpRegistryClient",
    "RegistryClient",
    "RegistryNotFoundError",
    "VcsClient",
    "Workspace",
]
