"""
Query catalog loader.

Reads the JSON query catalog (``sql_queries.json``) into a QueryCatalog.
Read failures and shape failures are reported as separate error kinds;
both are fatal to a run.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from sqldiagnostics.domain.catalog import QueryCatalog
from sqldiagnostics.domain.errors import CatalogParseError, CatalogReadError

logger = logging.getLogger(__name__)


def parse_catalog(content: bytes | str, origin: str = "<catalog>") -> QueryCatalog:
    """
    Parse catalog content.

    Missing fields become empty strings. The loader does not check that
    names or statements are non-empty.

    Raises:
        CatalogParseError: If the content is not a catalog document
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CatalogParseError(f"Catalog {origin} is not valid UTF-8: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise CatalogParseError(f"Failed to parse JSON catalog {origin}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogParseError(
            f"Catalog {origin} must be a JSON object, got {type(data).__name__}"
        )

    try:
        catalog = QueryCatalog.model_validate(data)
    except ValidationError as e:
        raise CatalogParseError(f"Catalog {origin} does not match the expected schema: {e}") from e

    return catalog


def load_catalog(path: Path | str) -> QueryCatalog:
    """
    Load the query catalog from disk.

    Raises:
        CatalogReadError: If the file cannot be read
        CatalogParseError: If the content is malformed
    """
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise CatalogReadError(f"Failed to read query catalog '{path}': {e}") from e

    catalog = parse_catalog(content, origin=str(path))

    source = catalog.source
    logger.info("Loaded %d queries from %s", len(catalog), path)
    if source.name or source.sqlserverversion:
        logger.info(
            "Query source: %s (SQL Server %s, author: %s)",
            source.name or "(unnamed)",
            source.sqlserverversion or "any",
            source.author or "unknown",
        )
    if source.url:
        logger.debug("Query source URL: %s", source.url)
    return catalog
