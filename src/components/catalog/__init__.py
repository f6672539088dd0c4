"""
Catalog component - Project, ad and survey lookups for reporting.
"""

from ._impl import InMemoryCatalog
from .ports import CatalogPort

__all__ = [
    "CatalogPort",
    "InMemoryCatalog",
]
