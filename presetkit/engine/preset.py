"""Runtime preset, field and category records.

These are built from the raw catalog models and are frozen once built.
Rebuilding the catalog creates new records rather than mutating old ones.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from presetkit.schemas.preset_schema import RawCategory, RawField, RawPreset

logger = logging.getLogger(__name__)

WILDCARD = "*"


@dataclass(frozen=True)
class PresetField:
    """A field definition referenced by presets. Opaque to the matcher."""

    id: str
    key: Optional[str]
    type: str
    label: str = ""
    universal: bool = False
    raw: Optional[RawField] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_raw(cls, field_id: str, raw: RawField) -> "PresetField":
        return cls(
            id=field_id,
            key=raw.key,
            type=raw.type,
            label=raw.label,
            universal=raw.universal,
            raw=raw,
        )


@dataclass(frozen=True, eq=False)
class Preset:
    """Schema describing how a feature with matching tags is classified.

    `tags` is the ordered tag pattern: each value is a literal or the
    wildcard ``*``. The first declared key is the primary tag.
    """

    id: str
    tags: Mapping[str, str]
    geometry: tuple[str, ...]
    name: str = ""
    add_tags: Mapping[str, str] = field(default_factory=dict)
    fields: tuple[PresetField, ...] = ()
    more_fields: tuple[PresetField, ...] = ()
    terms: tuple[str, ...] = ()
    icon: Optional[str] = None
    searchable: bool = True
    suggestion: bool = False
    replacement: bool = False
    base_score: float = 1.0
    visible: bool = True

    def match_geometry(self, geometry: str) -> bool:
        return geometry in self.geometry

    def match_score(self, entity_tags: Mapping[str, Any]) -> float:
        """Score how well `entity_tags` fit this preset's tag pattern.

        Every pattern key must be satisfied, otherwise the score is -1. A
        literal value match adds the base score, a wildcard match adds half
        of it. Matching `add_tags` beyond the pattern add the base score.
        """
        score = 0.0
        for key, value in self.tags.items():
            if entity_tags.get(key) == value:
                score += self.base_score
            elif value == WILDCARD and key in entity_tags:
                score += self.base_score / 2
            else:
                return -1

        for key, value in self.add_tags.items():
            if key not in self.tags and entity_tags.get(key) == value:
                score += self.base_score

        return score

    def is_fallback(self) -> bool:
        """Generic catch-all presets have no tags, or only an `area` tag."""
        return len(self.tags) == 0 or (len(self.tags) == 1 and "area" in self.tags)

    @property
    def primary_tag(self) -> Optional[tuple[str, str]]:
        """The first declared (key, value) pair, or None for untagged presets."""
        for key, value in self.tags.items():
            return key, value
        return None

    @classmethod
    def from_raw(
        cls,
        preset_id: str,
        raw: RawPreset,
        fields: Mapping[str, PresetField],
        visible: bool = True,
        raw_presets: Optional[Mapping[str, RawPreset]] = None,
    ) -> "Preset":
        raw_presets = {**(raw_presets or {}), preset_id: raw}
        tags = MappingProxyType(dict(raw.tags))
        return cls(
            id=preset_id,
            tags=tags,
            geometry=tuple(g.value for g in raw.geometry),
            name=raw.name,
            add_tags=MappingProxyType(dict(raw.add_tags)) if raw.add_tags is not None else tags,
            fields=_resolve_fields(preset_id, "fields", raw_presets, fields),
            more_fields=_resolve_fields(preset_id, "more_fields", raw_presets, fields),
            terms=tuple(raw.terms),
            icon=raw.icon,
            searchable=raw.searchable,
            suggestion=raw.suggestion,
            replacement=bool(raw.replacement),
            base_score=raw.match_score,
            visible=visible,
        )


@dataclass(frozen=True, eq=False)
class PresetCategory:
    """A named group of presets. Has no tags and never wins a match."""

    id: str
    name: str
    geometry: tuple[str, ...]
    members: Any
    icon: Optional[str] = None
    tags: Mapping[str, str] = field(default_factory=dict)
    searchable: bool = True
    suggestion: bool = False
    replacement: bool = False
    visible: bool = True

    def match_geometry(self, geometry: str) -> bool:
        return geometry in self.geometry

    def match_score(self, entity_tags: Mapping[str, Any]) -> float:
        return -1

    def is_fallback(self) -> bool:
        return False

    @property
    def primary_tag(self) -> None:
        return None

    @classmethod
    def from_raw(cls, category_id: str, raw: RawCategory, collection) -> "PresetCategory":
        from .collection import PresetCollection

        members = [collection.item(m) for m in raw.members]
        missing = [m for m, p in zip(raw.members, members) if p is None]
        if missing:
            logger.debug(f"Category {category_id} skips unknown members: {missing}")
        return cls(
            id=category_id,
            name=raw.name,
            geometry=tuple(g.value for g in raw.geometry),
            members=PresetCollection([p for p in members if p is not None]),
            icon=raw.icon,
        )


def _parent_id(preset_id: str) -> Optional[str]:
    if "/" not in preset_id:
        return None
    return preset_id.rsplit("/", 1)[0]


def _resolve_field_ids(
    preset_id: str,
    attr: str,
    raw_presets: Mapping[str, RawPreset],
    seen: set[str],
) -> list[str]:
    """Expand a preset's field ids, following parents and {preset} references."""
    if preset_id in seen:
        return []
    seen = seen | {preset_id}

    raw = raw_presets.get(preset_id)
    ids = getattr(raw, attr) if raw is not None else None

    if ids is None:
        # Inherit from the nearest ancestor present in the catalog
        parent = _parent_id(preset_id)
        while parent is not None and parent not in raw_presets:
            parent = _parent_id(parent)
        if parent is None:
            return []
        return _resolve_field_ids(parent, attr, raw_presets, seen)

    resolved: list[str] = []
    for field_id in ids:
        if field_id.startswith("{") and field_id.endswith("}"):
            resolved.extend(_resolve_field_ids(field_id[1:-1], attr, raw_presets, seen))
        else:
            resolved.append(field_id)
    return resolved


def _resolve_fields(
    preset_id: str,
    attr: str,
    raw_presets: Mapping[str, RawPreset],
    fields: Mapping[str, PresetField],
) -> tuple[PresetField, ...]:
    out: list[PresetField] = []
    for field_id in _resolve_field_ids(preset_id, attr, raw_presets, set()):
        f = fields.get(field_id)
        if f is not None and f not in out:
            out.append(f)
    return tuple(out)
