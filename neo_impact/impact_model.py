from __future__ import annotations
from dataclasses import dataclass, field, asdict
from math import pi, isfinite

from .errors import InvalidInput

# -----------------------------
# Physical constants & defaults
# -----------------------------
DEFAULT_DENSITY_KGPM3 = 3000.0   # kg/m^3, stony asteroid bulk density
R_EARTH_KM = 6371.0              # km, mean radius
J_PER_TON_TNT = 4.184e9          # J in 1 ton TNT
J_PER_KT_TNT = J_PER_TON_TNT * 1e3
J_PER_MT_TNT = J_PER_TON_TNT * 1e6

# Final crater diameter D[m] = CRATER_K_M * E[kt] ** CRATER_EXP
# Kiloton calibration, valid ~1 kt .. 1e10 kt (≈4e12 J .. 4e22 J).
CRATER_K_M = 70.0
CRATER_EXP = 0.3

# Reference objects for size comparisons
REFERENCE_LENGTHS_M = {
    "football_fields":        91.44,
    "statues_of_liberty":     93.0,
    "eiffel_towers":         330.0,
    "empire_state_buildings": 443.0,
    "titanics":              269.0,
    "blue_whales":            30.0,
}
REFERENCE_VOLUMES_M3 = {
    "olympic_pools":       2500.0,
    "hot_air_balloons":    2800.0,
}


def require_non_negative(name: str, value: float) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{name} must be a number, got {value!r}") from e
    if not isfinite(v):
        raise InvalidInput(f"{name} must be finite, got {v}")
    if v < 0.0:
        raise InvalidInput(f"{name} must be >= 0, got {v}")
    return v


@dataclass(frozen=True)
class ImpactObservation:
    diameter_km: float
    velocity_km_s: float
    miss_distance_km: float
    density_kgpm3: float = DEFAULT_DENSITY_KGPM3

    def __post_init__(self):
        for name in ("diameter_km", "velocity_km_s", "miss_distance_km", "density_kgpm3"):
            object.__setattr__(self, name, require_non_negative(name, getattr(self, name)))
        if self.density_kgpm3 == 0.0:
            raise InvalidInput("density_kgpm3 must be > 0")

    @property
    def diameter_m(self) -> float:
        return self.diameter_km * 1000.0

    @property
    def volume_m3(self) -> float:
        return sphere_volume_m3(self.diameter_km)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ImpactEnergy:
    mass_kg: float
    energy_j: float
    yield_kt: float
    yield_mt: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ConsequenceReport:
    crater_diameter_m: float
    size_comparisons: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "crater_diameter_m": self.crater_diameter_m,
            "crater_diameter_km": self.crater_diameter_m / 1000.0,
            "size_comparisons": dict(self.size_comparisons),
        }


# ---------- Estimator ----------
def sphere_volume_m3(diameter_km: float) -> float:
    r = require_non_negative("diameter_km", diameter_km) * 1000.0 / 2.0
    return (4.0 / 3.0) * pi * r**3


def sphere_mass_kg(diameter_km: float, density_kgpm3: float = DEFAULT_DENSITY_KGPM3) -> float:
    """Mass of a uniform sphere; zero diameter gives zero mass."""
    rho = require_non_negative("density_kgpm3", density_kgpm3)
    return sphere_volume_m3(diameter_km) * rho


def kinetic_energy_j(mass_kg: float, velocity_km_s: float) -> float:
    m = require_non_negative("mass_kg", mass_kg)
    v = require_non_negative("velocity_km_s", velocity_km_s) * 1000.0
    return 0.5 * m * v**2


# ---------- Consequences ----------
def to_yield(energy_j: float) -> tuple[float, float]:
    """Joules → (kilotons, megatons) TNT."""
    E = require_non_negative("energy_j", energy_j)
    return E / J_PER_KT_TNT, E / J_PER_MT_TNT


def crater_diameter_m(energy_j: float) -> float:
    """
    Final crater diameter from D = 70 m * E_kt^0.3 (joules converted to kilotons first).
    Calibrated for ~1 kt .. 1e10 kt; outside that range the value is an extrapolation.
    """
    E_kt, _ = to_yield(energy_j)
    if E_kt <= 0.0:
        return 0.0
    return CRATER_K_M * E_kt**CRATER_EXP


def size_comparisons(diameter_km: float) -> dict[str, float]:
    """Diameter over reference lengths, sphere volume over reference volumes."""
    d_m = require_non_negative("diameter_km", diameter_km) * 1000.0
    vol = sphere_volume_m3(diameter_km)
    out = {k: d_m / ref for k, ref in REFERENCE_LENGTHS_M.items()}
    out.update({k: vol / ref for k, ref in REFERENCE_VOLUMES_M3.items()})
    return out


def estimate_energy(obs: ImpactObservation) -> ImpactEnergy:
    m = sphere_mass_kg(obs.diameter_km, obs.density_kgpm3)
    E = kinetic_energy_j(m, obs.velocity_km_s)
    kt, mt = to_yield(E)
    return ImpactEnergy(mass_kg=m, energy_j=E, yield_kt=kt, yield_mt=mt)


def estimate_consequences(energy: ImpactEnergy, diameter_km: float) -> ConsequenceReport:
    return ConsequenceReport(
        crater_diameter_m=crater_diameter_m(energy.energy_j),
        size_comparisons=size_comparisons(diameter_km),
    )
