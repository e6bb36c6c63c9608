from optistats.catalog.base import Catalog
from optistats.catalog.memory import InMemoryCatalog

__all__ = ["Catalog", "InMemoryCatalog"]
