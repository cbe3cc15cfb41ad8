"""
Catálogo declarativo: estado deseado en YAML.
"""

from olcsync.catalog.loader import CatalogFile, CatalogLoader, DatabaseConfig

__all__ = ["CatalogFile", "CatalogLoader", "DatabaseConfig"]
