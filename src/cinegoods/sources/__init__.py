"""Source registry mapping source names to source classes."""

from pathlib import Path
from typing import Type

from cinegoods.sources.base import BaseSource, SourcePolicy
from cinegoods.sources.cgv import CGVSource
from cinegoods.sources.lotte import LotteSource
from cinegoods.sources.megabox import MegaboxSource

# Registry mapping source names to source classes
SOURCE_REGISTRY: dict[str, Type[BaseSource]] = {
    "cgv": CGVSource,
    "lotte": LotteSource,
    "megabox": MegaboxSource,
}


def get_source(name: str, debug_dir: Path = Path(".")) -> BaseSource | None:
    """
    Get a source instance by name.

    Args:
        name: The source name (e.g., "cgv", "megabox")
        debug_dir: Directory for debug artifacts

    Returns:
        Source instance or None if the name is unknown
    """
    source_class = SOURCE_REGISTRY.get(name)
    if source_class:
        return source_class(debug_dir=debug_dir)
    return None


__all__ = [
    "SOURCE_REGISTRY",
    "get_source",
    "BaseSource",
    "SourcePolicy",
    "CGVSource",
    "LotteSource",
    "MegaboxSource",
]
