"""
SQL infrastructure package: catalog loading and statement execution.
"""

from .catalog_loader import load_catalog, parse_catalog
from .query_executor import QueryExecutor

__all__ = ["QueryExecutor", "load_catalog", "parse_catalog"]
