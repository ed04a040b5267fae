"""Content package for loading the question catalog."""

from .loaders import (
    get_default_catalog_path,
    load_catalog,
    parse_catalog,
)

__all__ = [
    "get_default_catalog_path",
    "load_catalog",
    "parse_catalog",
]
