"""Pydantic model for preset index configuration."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .ribbon_schema import MinifiedRibbonItem


def _generic_favorites() -> list[MinifiedRibbonItem]:
    return [
        MinifiedRibbonItem(preset_id="point", geometry="point"),
        MinifiedRibbonItem(preset_id="line", geometry="line"),
        MinifiedRibbonItem(preset_id="area", geometry="area"),
    ]


class IndexSettings(BaseModel):
    """Limits, storage keys and catalog location for a PresetIndex."""

    favorites_limit: int = Field(default=10, ge=1, description="Maximum number of favorites")
    recents_limit: int = Field(default=30, ge=1, description="Maximum number of recents")
    favorites_key: str = Field(default="preset_favorites", description="Storage key for favorites")
    recents_key: str = Field(default="preset_recents", description="Storage key for recents")
    default_favorites: list[MinifiedRibbonItem] = Field(
        default_factory=_generic_favorites,
        description="Favorites used when nothing has been persisted yet",
    )
    recent_defaults_limit: int = Field(
        default=4, ge=0, description="How many recents lead the defaults() list"
    )
    catalog_path: Optional[Path] = Field(
        default=None, description="Catalog file to use instead of the built-in one"
    )
    fetch_timeout: Optional[float] = Field(
        default=None, gt=0, description="Seconds before an external catalog fetch gives up"
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "IndexSettings":
        """Load settings from a YAML configuration file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    def to_yaml(self, path: str | Path) -> None:
        """Save settings to a YAML configuration file."""
        path = Path(path)
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
