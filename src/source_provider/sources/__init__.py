"""The kinds of origin a source can come from."""

from source_provider.sources.base import SourceVariant
from source_provider.sources.local import LocalDirectory
from source_provider.sources.registry import RegistryPackage
from source_provider.sources.repository import GitRepository

__all__ = ["GitRepository", "LocalDirectory", "RegistryPackage", "SourceVariant"]
