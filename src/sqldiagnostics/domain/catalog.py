"""
Query catalog domain models.

A catalog is an ordered list of named T-SQL statements plus descriptive
metadata about where the statements came from. Position in the list is the
identity of a query within a run.
"""

from typing import Iterator, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuerySource(BaseModel):
    """Provenance of a catalog. Carried through, never interpreted."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    sqlserverversion: str = Field("", description="SQL Server version the queries target")
    name: str = Field("", description="Title of the query collection")
    author: str = ""
    lastmodified: str = ""
    source: str = ""
    url: str = ""
    comments: str = ""
    copyright: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return "" if v is None else v


class QueryDefinition(BaseModel):
    """A single named statement from the catalog."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field("", description="Query name, used for sheet naming")
    description: str = Field("", description="Shown on the console while running")
    query: str = Field("", description="T-SQL statement text")
    notes: str = Field("", description="Free-text notes copied to the index sheet")

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return "" if v is None else v


class QueryCatalog(BaseModel):
    """
    Ordered, immutable collection of query definitions.

    The JSON document shape is::

        {"querysource": {...}, "queries": [{"name": ..., "query": ...}, ...]}
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    source: QuerySource = Field(default_factory=QuerySource, alias="querysource")
    queries: Tuple[QueryDefinition, ...] = Field(default_factory=tuple)

    @field_validator("source", mode="before")
    @classmethod
    def null_source(cls, v):
        return {} if v is None else v

    @field_validator("queries", mode="before")
    @classmethod
    def null_queries(cls, v):
        return () if v is None else v

    def __len__(self) -> int:
        return len(self.queries)

    def enumerate(self) -> Iterator[Tuple[int, QueryDefinition]]:
        """Yield (position, definition) pairs with 1-based positions."""
        return enumerate(self.queries, start=1)
