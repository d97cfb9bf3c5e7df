from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum

from .impact_model import R_EARTH_KM, require_non_negative as _check


class ThreatCategory(IntEnum):
    SAFE_FLYBY = 0
    MINOR_AIRBURST = 1
    REGIONAL = 2
    CONTINENTAL = 3
    EXTINCTION = 4


# (lower bound in kilotons TNT, category), ascending. A yield must strictly exceed the
# bound to enter the category: exactly 1e5 kt is still MINOR_AIRBURST.
YIELD_BOUNDS_KT = (
    (0.0, ThreatCategory.MINOR_AIRBURST),
    (1e5, ThreatCategory.REGIONAL),
    (1e7, ThreatCategory.CONTINENTAL),
    (1e9, ThreatCategory.EXTINCTION),
)

DESCRIPTIONS = {
    ThreatCategory.SAFE_FLYBY:
        "Safe flyby. The object passes Earth without impacting.",
    ThreatCategory.MINOR_AIRBURST:
        "Minor airburst. Local damage, most energy released in the atmosphere.",
    ThreatCategory.REGIONAL:
        "Regional devastation. Destruction on the scale of a city or small country.",
    ThreatCategory.CONTINENTAL:
        "Continental catastrophe. Widespread destruction and global climate effects.",
    ThreatCategory.EXTINCTION:
        "Extinction-level event. Global devastation comparable to the Chicxulub impact.",
}


@dataclass(frozen=True)
class SeverityAssessment:
    category: ThreatCategory
    is_impact: bool
    description: str

    def to_dict(self) -> dict:
        return {"category": self.category.name, "level": int(self.category),
                "is_impact": self.is_impact, "description": self.description}


def category_for_yield(yield_kt: float) -> ThreatCategory:
    """Highest category whose lower bound the yield strictly exceeds."""
    E_kt = _check("yield_kt", yield_kt)
    cat = ThreatCategory.SAFE_FLYBY
    for bound, c in YIELD_BOUNDS_KT:
        if E_kt > bound:
            cat = c
    return cat


def classify(miss_distance_km: float, yield_kt: float,
             impact_threshold_km: float = R_EARTH_KM) -> SeverityAssessment:
    """
    Impact when the geocentric miss distance is below the threshold (Earth's radius by
    default); a non-impact is always SAFE_FLYBY whatever the yield.
    """
    miss = _check("miss_distance_km", miss_distance_km)
    thr = _check("impact_threshold_km", impact_threshold_km)
    E_kt = _check("yield_kt", yield_kt)

    is_impact = miss < thr
    cat = category_for_yield(E_kt) if is_impact else ThreatCategory.SAFE_FLYBY
    return SeverityAssessment(category=cat, is_impact=is_impact, description=DESCRIPTIONS[cat])
