"""Pydantic models for the persisted form of favorites and recents."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

RibbonSource = Literal["favorite", "recent"]


class MinifiedRibbonItem(BaseModel):
    """The only persisted representation of a ribbon item.

    Provenance is not stored; it comes from the list the item is loaded into.
    """

    model_config = ConfigDict(populate_by_name=True)

    preset_id: str = Field(alias="pID", min_length=1)
    geometry: str = Field(alias="geom", min_length=1)


MinifiedRibbonList = TypeAdapter(list[MinifiedRibbonItem])
