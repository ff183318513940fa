"""
Hauswart — Reference Data Repository.

Loads StammDaten.json and answers lookups joining tasks to the building,
unit and tenants they concern. The file is re-read whenever its
modification time changes; each load builds a complete new index snapshot
and swaps it in with a single assignment, so readers never see a
half-built index.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from hauswart.config import settings
from hauswart.data.reference_models import (
    Address,
    Area,
    AreaWithRelations,
    Building,
    BuildingWithRelations,
    Category,
    Person,
    ReferenceData,
    ReferenceFile,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_TRAILING_CLOSERS = re.compile(r"""[)"']+$""")
_LABEL_PATTERN = re.compile(r"^(.*)\s+([0-9]+)$")


def normalize_category_name(name: str) -> str:
    return name.strip().lower()


def area_key(category_id: int, area_id: int) -> str:
    return f"{category_id}:{area_id}"


def normalize_label(text: str) -> str:
    """Trim, collapse whitespace and drop trailing ``)``, ``"`` and ``'``."""
    normalized = _WHITESPACE.sub(" ", text.strip())
    return _TRAILING_CLOSERS.sub("", normalized)


def split_label(text: str) -> tuple[str, int] | None:
    """Split an area label into (category name, area id).

    Labels are typed by people, e.g. ``"Wohnung 12"`` or
    ``"Gebäude A - Keller 3"``. Anything up to the last hyphen is a building
    qualifier and is ignored; the rest must end in ``<name> <digits>``.
    """
    normalized = normalize_label(text)
    segment = normalized.rsplit("-", 1)[-1].strip() if "-" in normalized else normalized

    match = _LABEL_PATTERN.match(segment)
    if not match:
        return None
    return match.group(1), int(match.group(2))


class ReferenceIndex:
    """One immutable snapshot of the dataset and its lookup tables."""

    def __init__(self, data: ReferenceData) -> None:
        self.data = data
        self.address_by_id: dict[int, Address] = {a.id: a for a in data.addresses}
        self.person_by_id: dict[int, Person] = {p.id: p for p in data.persons}
        self.category_by_id: dict[int, Category] = {c.id: c for c in data.categories}
        self.category_by_name: dict[str, Category] = {
            normalize_category_name(c.name): c for c in data.categories
        }
        self.building_by_id: dict[int, Building] = {b.id: b for b in data.buildings}
        self.area_by_key: dict[str, Area] = {
            area_key(a.category_id, a.id): a for a in data.areas
        }


def load_reference_data(path: str | Path) -> ReferenceData:
    """Read and validate a StammDaten.json file."""
    content = Path(path).read_text(encoding="utf-8")
    return ReferenceFile.model_validate_json(content).stammdaten


class ReferenceRepository:
    """Lookups over the reference dataset (addresses, persons, buildings, areas).

    Unknown ids, keys and labels resolve to None. Tenant ids without a
    matching person are dropped when resolving an area.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path: Path | None = Path(path if path is not None else settings.STAMMDATEN_PATH)
        self._mtime: int | None = None
        self._index = ReferenceIndex(ReferenceData())
        self.refresh_if_stale(force=True)

    @classmethod
    def from_data(cls, data: ReferenceData) -> ReferenceRepository:
        """Build a repository over an in-memory dataset (never reloads)."""
        repo = cls.__new__(cls)
        repo._path = None
        repo._mtime = None
        repo._index = ReferenceIndex(data)
        return repo

    def refresh_if_stale(self, force: bool = False) -> bool:
        """Reload the dataset if the file's mtime changed. Returns True on reload."""
        if self._path is None:
            return False

        mtime = os.stat(self._path).st_mtime_ns
        if not force and mtime == self._mtime:
            return False

        self._index = ReferenceIndex(load_reference_data(self._path))
        self._mtime = mtime
        data = self._index.data
        logger.info(
            "Reference data loaded from %s: %d building(s), %d area(s), %d person(s)",
            self._path,
            len(data.buildings),
            len(data.areas),
            len(data.persons),
        )
        return True

    def _current(self) -> ReferenceIndex:
        self.refresh_if_stale()
        return self._index

    @property
    def data(self) -> ReferenceData:
        return self._current().data

    # ---- direct lookups ----

    def building_by_id(self, building_id: int) -> Building | None:
        return self._current().building_by_id.get(building_id)

    def area_by_key(self, category_id: int, area_id: int) -> Area | None:
        return self._current().area_by_key.get(area_key(category_id, area_id))

    def area_by_category_name_and_id(self, category_name: str, area_id: int) -> Area | None:
        index = self._current()
        category = index.category_by_name.get(normalize_category_name(category_name))
        if category is None:
            return None
        return index.area_by_key.get(area_key(category.id, area_id))

    def area_by_label(self, text: str) -> Area | None:
        """Resolve a free-text label like ``"Haus 2 - Keller 3"`` to an area."""
        parts = split_label(text)
        if parts is None:
            return None

        category_name, area_id = parts
        area = self.area_by_category_name_and_id(category_name, area_id)
        if area is None:
            logger.warning("No area for label %r (%s %d)", text, category_name, area_id)
        return area

    def areas_by_building_id(self, building_id: int) -> list[Area]:
        return [a for a in self._current().data.areas if a.building_id == building_id]

    def areas_by_tenant_id(self, person_id: int) -> list[Area]:
        return [a for a in self._current().data.areas if person_id in a.tenant_ids]

    # ---- relations ----

    def resolve_area(self, area: Area) -> AreaWithRelations:
        index = self._current()
        tenants = (index.person_by_id.get(pid) for pid in area.tenant_ids)
        return AreaWithRelations(
            area=area,
            building=index.building_by_id.get(area.building_id),
            category=index.category_by_id.get(area.category_id),
            tenants=tuple(t for t in tenants if t is not None),
        )

    def area_with_relations(self, category_id: int, area_id: int) -> AreaWithRelations | None:
        area = self.area_by_key(category_id, area_id)
        if area is None:
            return None
        return self.resolve_area(area)

    def resolve_building(self, building_id: int) -> BuildingWithRelations | None:
        index = self._current()
        building = index.building_by_id.get(building_id)
        if building is None:
            return None

        return BuildingWithRelations(
            building=building,
            address=index.address_by_id.get(building.address_id),
            category=index.category_by_id.get(building.category_id),
            areas=tuple(self.resolve_area(a) for a in self.areas_by_building_id(building_id)),
        )
