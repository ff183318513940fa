"""
Hauswart — Reference Data Models.

StammDaten.json holds five collections under a top-level "Stammdaten" key.
Field aliases are the German keys used in the file; Python code uses the
English attribute names.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Address(_Record):
    id: int = Field(alias="ID")
    street: str = Field(default="", alias="Straße")
    house_number: str = Field(default="", alias="Hausnummer")
    postal_code: str = Field(default="", alias="PLZ")
    city: str = Field(default="", alias="Ort")


class Person(_Record):
    id: int = Field(alias="ID")
    name: str = Field(default="", alias="Name")
    phone: str = Field(default="", alias="Telefon")


class Category(_Record):
    """A "Typ" such as Wohnung or Keller, applied to buildings and areas."""

    id: int = Field(alias="ID")
    name: str = Field(alias="Name")


class Building(_Record):
    category_id: int = Field(alias="Typ.ID")
    id: int = Field(alias="ID")
    address_id: int = Field(alias="Adresse.ID")


class Area(_Record):
    """A unit inside a building, keyed by (category_id, id)."""

    category_id: int = Field(alias="Typ.ID")
    id: int = Field(alias="ID")
    building_id: int = Field(alias="Haus.ID")
    entrance: str = Field(default="", alias="Eingang")
    location: str = Field(default="", alias="Lage")
    tenant_ids: tuple[int, ...] = Field(default=(), alias="Person.ID")


class ReferenceData(_Record):
    addresses: tuple[Address, ...] = Field(default=(), alias="Adresse")
    persons: tuple[Person, ...] = Field(default=(), alias="Person")
    categories: tuple[Category, ...] = Field(default=(), alias="Typ")
    buildings: tuple[Building, ...] = Field(default=(), alias="Haus")
    areas: tuple[Area, ...] = Field(default=(), alias="Bereich")


class ReferenceFile(_Record):
    stammdaten: ReferenceData = Field(default_factory=ReferenceData, alias="Stammdaten")


class AreaWithRelations(_Record):
    area: Area
    building: Building | None = None
    category: Category | None = None
    tenants: tuple[Person, ...] = ()


class BuildingWithRelations(_Record):
    building: Building
    address: Address | None = None
    category: Category | None = None
    areas: tuple[AreaWithRelations, ...] = ()
