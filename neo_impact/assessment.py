from __future__ import annotations
from dataclasses import dataclass
import logging

from .impact_model import (
    ImpactObservation, ImpactEnergy, ConsequenceReport,
    estimate_energy, estimate_consequences, R_EARTH_KM,
)
from .severity import SeverityAssessment, classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImpactAssessment:
    observation: ImpactObservation
    energy: ImpactEnergy
    consequences: ConsequenceReport
    severity: SeverityAssessment

    def to_dict(self) -> dict:
        return {
            "observation": self.observation.to_dict(),
            "energy": self.energy.to_dict(),
            "consequences": self.consequences.to_dict(),
            "severity": self.severity.to_dict(),
        }


def assess(obs: ImpactObservation, impact_threshold_km: float = R_EARTH_KM) -> ImpactAssessment:
    """Observation → energy → consequences → severity."""
    energy = estimate_energy(obs)
    consequences = estimate_consequences(energy, obs.diameter_km)
    severity = classify(obs.miss_distance_km, energy.yield_kt, impact_threshold_km)
    logger.debug("[assess] d=%.4fkm v=%.2fkm/s miss=%.0fkm E=%.3eJ -> %s",
                 obs.diameter_km, obs.velocity_km_s, obs.miss_distance_km,
                 energy.energy_j, severity.category.name)
    return ImpactAssessment(observation=obs, energy=energy,
                            consequences=consequences, severity=severity)
