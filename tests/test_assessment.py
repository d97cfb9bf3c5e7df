import json

import pytest

from neo_impact import assess, ImpactObservation, ThreatCategory


def test_full_pipeline_one_km_impact():
    obs = ImpactObservation(diameter_km=1.0, velocity_km_s=20.0, miss_distance_km=100.0)
    a = assess(obs)
    assert a.energy.energy_j == pytest.approx(3.1416e20, rel=1e-4)
    # ~7.5e7 kt
    assert a.severity.category is ThreatCategory.CONTINENTAL
    assert a.consequences.crater_diameter_m > 0.0


def test_pipeline_is_idempotent():
    obs = ImpactObservation(diameter_km=0.14, velocity_km_s=17.3, miss_distance_km=5000.0)
    assert assess(obs) == assess(obs)
    assert assess(obs).to_dict() == assess(obs).to_dict()


def test_threshold_passed_through():
    obs = ImpactObservation(diameter_km=0.14, velocity_km_s=17.3, miss_distance_km=10_000.0)
    assert assess(obs).severity.is_impact is False
    assert assess(obs, impact_threshold_km=12_742.0).severity.is_impact is True


def test_to_dict_serializes_to_json():
    a = assess(ImpactObservation(0.02, 19.0, 500_000.0))
    blob = json.loads(json.dumps(a.to_dict()))
    assert set(blob) == {"observation", "energy", "consequences", "severity"}
    assert blob["severity"]["category"] == "SAFE_FLYBY"
    assert blob["observation"]["density_kgpm3"] == 3000.0
