"""Interactive console for VQL queries."""

from .catalog import ArtifactDefinition, CatalogEntry, FieldDescriptor, InMemoryArtifactRepository, Suggestion
from .hookspecs import hookimpl

__version__ = "0.1.0"

__all__ = [
    "ArtifactDefinition",
    "CatalogEntry",
    "FieldDescriptor",
    "InMemoryArtifactRepository",
    "Suggestion",
    "hookimpl",
]
