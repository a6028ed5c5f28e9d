"""Input records of the project-type SmartScore engines.

Each block is a provider record (INSEE, DVF, BPE, FINESS, ...) already
fetched by the caller. Blocks are loosely typed mappings because their shape
varies by producer; every block is optional.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .smartscore import ZoneType

Record = Optional[dict[str, Any]]


class SmartScoreInput(BaseModel):
    """Fields shared by every project-type input."""

    insee: Record = Field(None, description="INSEE commune indicators")

    model_config = {
        "extra": "allow",
        "populate_by_name": True,
    }

    @classmethod
    def coerce(cls, payload: Any) -> Any:
        """Accept an instance of the model or a plain mapping."""
        if isinstance(payload, cls):
            return payload
        return cls.model_validate(payload or {})


class ZoneHintMixin(BaseModel):
    zone_type_hint: ZoneType | None = Field(None, alias="zoneTypeHint")

    @field_validator("zone_type_hint", mode="before")
    @classmethod
    def drop_unknown_hint(cls, v: Any) -> Any:
        """Unknown hints are ignored so the zone gets inferred from density."""
        if isinstance(v, ZoneType):
            return v
        if isinstance(v, str) and v.strip().lower() in {z.value for z in ZoneType}:
            return v.strip().lower()
        return None


class LogementSmartScoreInput(SmartScoreInput, ZoneHintMixin):
    prices: Record = Field(None, description="DVF aggregates (median_eur_m2, evolution_1an, ...)")
    transactions: Record = Field(None, description="DVF transactions (count)")
    bpe: Record = Field(None, description="BPE equipment counts")


class EhpadSmartScoreInput(SmartScoreInput, ZoneHintMixin):
    ehpad: Record = Field(None, description="FINESS establishments and competition analysis")
    services_sante: Record = Field(None, alias="servicesSante", description="Nearest health services")


class SeniorSmartScoreInput(SmartScoreInput):
    competition: Record = None
    bpe: Record = None


class EtudiantSmartScoreInput(SmartScoreInput):
    mesr: Record = Field(None, description="Student enrolment (students_total, students_evolution)")
    campuses: Optional[list[Optional[dict[str, Any]]]] = Field(None, description="Campuses with distance_km")
    competition: Record = None
    bpe: Record = None
    prices: Record = None


class BureauxSmartScoreInput(SmartScoreInput):
    emploi: Record = None
    access: Record = None
    offre: Record = None
    bpe: Record = None


class CommerceSmartScoreInput(SmartScoreInput):
    bpe: Record = None
    access: Record = None
    concurrence: Record = None
    revenus: Record = None


class HotelSmartScoreInput(SmartScoreInput):
    tourisme: Record = None
    offre: Record = None
    access: Record = None
    economie: Record = None
