"""Impact-physics and threat-classification engine for near-Earth objects."""
from .errors import InvalidInput, DataUnavailable, ObjectNotFound
from .impact_model import (
    ImpactObservation, ImpactEnergy, ConsequenceReport,
    sphere_mass_kg, kinetic_energy_j, to_yield, crater_diameter_m, size_comparisons,
    estimate_energy, estimate_consequences,
)
from .severity import ThreatCategory, SeverityAssessment, classify
from .assessment import ImpactAssessment, assess

__version__ = "1.0.0"
