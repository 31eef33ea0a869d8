"""Pydantic models for the raw preset catalog.

A catalog is the nested structure the index is built from: presets, fields
and categories keyed by id, plus the ordered default preset ids for each
geometry. The same shape is used for the built-in catalog and for any
external catalog fetched by URL.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Geometry(str, Enum):
    """Structural role a feature plays on the map."""

    POINT = "point"
    VERTEX = "vertex"
    LINE = "line"
    AREA = "area"
    RELATION = "relation"


GEOMETRIES: tuple[str, ...] = tuple(g.value for g in Geometry)


class RawField(BaseModel):
    """A field definition as it appears in the catalog."""

    model_config = ConfigDict(extra="allow")

    key: Optional[str] = None
    type: str = "text"
    label: str = ""
    universal: bool = False


class RawPreset(BaseModel):
    """A preset definition as it appears in the catalog.

    `tags` keeps the declared key order; the first key is the preset's
    primary tag.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""
    geometry: list[Geometry] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
    add_tags: Optional[dict[str, str]] = Field(default=None, alias="addTags")
    fields: Optional[list[str]] = None
    more_fields: Optional[list[str]] = Field(default=None, alias="moreFields")
    terms: list[str] = Field(default_factory=list)
    icon: Optional[str] = None
    searchable: bool = True
    suggestion: bool = False
    replacement: Optional[str | bool] = None
    match_score: float = Field(default=1.0, alias="matchScore")


class RawCategory(BaseModel):
    """A category grouping several presets under one ribbon entry."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    icon: Optional[str] = None
    geometry: list[Geometry] = Field(default_factory=list)
    members: list[str] = Field(default_factory=list)


class CatalogDefaults(BaseModel):
    """Ordered default preset ids offered for each geometry."""

    area: list[str] = Field(default_factory=list)
    line: list[str] = Field(default_factory=list)
    point: list[str] = Field(default_factory=list)
    vertex: list[str] = Field(default_factory=list)
    relation: list[str] = Field(default_factory=list)


class Catalog(BaseModel):
    """Complete preset catalog: presets, fields, categories and defaults."""

    presets: dict[str, RawPreset] = Field(default_factory=dict)
    fields: dict[str, RawField] = Field(default_factory=dict)
    categories: dict[str, RawCategory] = Field(default_factory=dict)
    defaults: Optional[CatalogDefaults] = None

    def save(self, path: str | Path) -> None:
        """Serialize catalog to JSON file."""
        Path(path).write_text(self.model_dump_json(indent=2, by_alias=True, exclude_none=True))

    @classmethod
    def load(cls, path: str | Path) -> "Catalog":
        """Load catalog from JSON file."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
