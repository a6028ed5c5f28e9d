"""Territory helpers shared by the project scorers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mimmoza.core.scoring_constants import ZONE_DENSITY_RURAL, ZONE_DENSITY_URBAN
from mimmoza.domain.calculator.normalizer import to_number
from mimmoza.domain.models.smartscore import ZoneType


def infer_zone_type(insee: Mapping[str, Any] | None, hint: ZoneType | str | None = None) -> ZoneType:
    """Zone type from an explicit hint, else from INSEE density.

    >= 3000 hab./km² is urbain, <= 300 rural, anything else (or no density)
    periurbain.
    """
    if hint:
        return ZoneType(hint)

    density = to_number((insee or {}).get("densite"))
    if density is None:
        return ZoneType.PERIURBAIN
    if density >= ZONE_DENSITY_URBAN:
        return ZoneType.URBAIN
    if density <= ZONE_DENSITY_RURAL:
        return ZoneType.RURAL
    return ZoneType.PERIURBAIN
