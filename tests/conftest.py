import pytest


def make_record(neo_id="2000433", name="433 Eros (A898 PA)", d_min=0.9, d_max=1.1,
                velocity="20.0", miss="7000000.5", hazardous=False, date="2026-10-17"):
    rec = {
        "id": neo_id,
        "name": name,
        "is_potentially_hazardous_asteroid": hazardous,
        "estimated_diameter": {"kilometers": {}},
        "close_approach_data": [{
            "close_approach_date": date,
            "orbiting_body": "Earth",
            "relative_velocity": {},
            "miss_distance": {},
        }],
    }
    if d_min is not None:
        rec["estimated_diameter"]["kilometers"]["estimated_diameter_min"] = d_min
    if d_max is not None:
        rec["estimated_diameter"]["kilometers"]["estimated_diameter_max"] = d_max
    if velocity is not None:
        rec["close_approach_data"][0]["relative_velocity"]["kilometers_per_second"] = velocity
    if miss is not None:
        rec["close_approach_data"][0]["miss_distance"]["kilometers"] = miss
    return rec


@pytest.fixture
def record():
    return make_record()


@pytest.fixture
def feed_payload():
    return {
        "element_count": 3,
        "near_earth_objects": {
            "2026-10-17": [
                make_record(neo_id="1", name="far", miss="9000000"),
                make_record(neo_id="2", name="near", miss="400000"),
            ],
            "2026-10-18": [
                make_record(neo_id="3", name="nearest", miss="1000"),
            ],
        },
    }
