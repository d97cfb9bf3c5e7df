"""
NeoWs catalog access: a TTL cache, the record → observation adapter and a small client.

Catalog records vary in completeness. Absent nested fields default to 0 and are listed
in ``CatalogObject.missing_fields``. Without a miss distance there is no basis for an
impact, so ``CatalogObject.assess`` reports such a record as a SAFE_FLYBY and the feed
lists it after every object with a known distance.
Transport and payload failures raise ``DataUnavailable`` and never reach the engine.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from math import isfinite
from typing import Any, Callable, Dict, Hashable, Optional, Tuple
import logging
import threading
import time

import httpx

from .config import CatalogConfig, mask_key
from .errors import DataUnavailable, InvalidInput, ObjectNotFound
from .assessment import ImpactAssessment, assess as run_assessment
from .impact_model import ImpactObservation, DEFAULT_DENSITY_KGPM3, R_EARTH_KM
from .severity import SeverityAssessment, ThreatCategory, DESCRIPTIONS

logger = logging.getLogger(__name__)


# -------------------------------
# TTL cache
# -------------------------------
class TTLCache:
    """Key-value store whose entries expire ``ttl_s`` seconds after being set."""

    def __init__(self, ttl_s: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_s = float(ttl_s)
        self._clock = clock
        self._data: Dict[Hashable, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            expires, value = item
            if self._clock() >= expires:
                self._data.pop(key, None)
                return None
            return value

    def set(self, key: Hashable, value: Any, ttl_s: Optional[float] = None) -> None:
        ttl = self.ttl_s if ttl_s is None else ttl_s
        with self._lock:
            now = self._clock()
            # drop everything already expired so unread keys do not pile up
            for k in [k for k, (exp, _) in self._data.items() if now >= exp]:
                del self._data[k]
            self._data[key] = (now + ttl, value)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


# -------------------------------
# Record adapter
# -------------------------------
@dataclass(frozen=True)
class CatalogObject:
    neo_id: str
    name: str
    observation: ImpactObservation
    is_potentially_hazardous: bool = False
    close_approach_date: Optional[str] = None
    missing_fields: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields

    @property
    def has_miss_distance(self) -> bool:
        return "miss_distance" not in self.missing_fields

    def assess(self, impact_threshold_km: float = R_EARTH_KM) -> ImpactAssessment:
        """Run the pipeline; an unknown miss distance never counts as an impact."""
        a = run_assessment(self.observation, impact_threshold_km)
        if self.has_miss_distance:
            return a
        safe = ThreatCategory.SAFE_FLYBY
        return replace(a, severity=SeverityAssessment(
            category=safe, is_impact=False, description=DESCRIPTIONS[safe]))

    def to_dict(self) -> dict:
        return {
            "id": self.neo_id,
            "name": self.name,
            "is_potentially_hazardous": self.is_potentially_hazardous,
            "close_approach_date": self.close_approach_date,
            "missing_fields": list(self.missing_fields),
            "observation": self.observation.to_dict(),
        }


def _num(value: Any) -> Optional[float]:
    """Float from a catalog value (NeoWs sends many numbers as strings); None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    return v if isfinite(v) else None


def _dig(record: Any, *path: str) -> Any:
    cur = record
    for key in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _pick_approach(approaches: Any) -> Optional[dict]:
    """Closest Earth approach; records without a usable miss distance sort last."""
    if not isinstance(approaches, list):
        return None
    earth = [a for a in approaches if isinstance(a, dict)
             and a.get("orbiting_body", "Earth") == "Earth"]
    if not earth:
        return None

    def miss(a):
        v = _num(_dig(a, "miss_distance", "kilometers"))
        return float("inf") if v is None else v
    return min(earth, key=miss)


def _extract(record: dict) -> Tuple[Dict[str, float], list, Optional[dict]]:
    missing = []

    d_min = _num(_dig(record, "estimated_diameter", "kilometers", "estimated_diameter_min"))
    d_max = _num(_dig(record, "estimated_diameter", "kilometers", "estimated_diameter_max"))
    if d_min is None:
        missing.append("estimated_diameter_min")
    if d_max is None:
        missing.append("estimated_diameter_max")
    present = [d for d in (d_min, d_max) if d is not None]
    diameter = sum(present) / len(present) if present else 0.0

    approach = _pick_approach(record.get("close_approach_data"))
    velocity = _num(_dig(approach, "relative_velocity", "kilometers_per_second"))
    if velocity is None:
        missing.append("relative_velocity")
        velocity = 0.0
    miss = _num(_dig(approach, "miss_distance", "kilometers"))
    if miss is None:
        missing.append("miss_distance")
        miss = 0.0

    return {"diameter_km": diameter, "velocity_km_s": velocity, "miss_distance_km": miss}, missing, approach


def observation_from_record(record: dict, density_kgpm3: float = DEFAULT_DENSITY_KGPM3) -> ImpactObservation:
    values, _, _ = _extract(record)
    return ImpactObservation(density_kgpm3=density_kgpm3, **values)


def catalog_object_from_record(record: dict, density_kgpm3: float = DEFAULT_DENSITY_KGPM3) -> CatalogObject:
    values, missing, approach = _extract(record)
    neo_id = str(record.get("id") or record.get("neo_reference_id") or "")
    if missing:
        logger.debug("[adapter] id=%s defaulted fields=%s", neo_id, missing)
    return CatalogObject(
        neo_id=neo_id,
        name=str(record.get("name") or neo_id),
        observation=ImpactObservation(density_kgpm3=density_kgpm3, **values),
        is_potentially_hazardous=bool(record.get("is_potentially_hazardous_asteroid", False)),
        close_approach_date=(approach or {}).get("close_approach_date"),
        missing_fields=tuple(missing),
    )


# -------------------------------
# NeoWs client
# -------------------------------
class NeoWsClient:
    """
    Thin NeoWs reader. Responses are cached per (path, params) for ``cache_ttl_s``.
    No retries: any failure surfaces as DataUnavailable for the caller to report.
    """

    def __init__(self, config: CatalogConfig, cache: Optional[TTLCache] = None,
                 http: Optional[httpx.Client] = None):
        self.config = config
        self.cache = cache if cache is not None else TTLCache(config.cache_ttl_s)
        self._http = http if http is not None else httpx.Client(
            base_url=config.base_url, timeout=config.timeout_s)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "NeoWsClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _get_json(self, path: str, params: Dict[str, Any]) -> dict:
        cache_key = (path, tuple(sorted(params.items())))
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("[cache.hit] %s", path)
            return cached

        logger.info("[catalog.fetch] GET %s params=%s key=%s", path, params, mask_key(self.config.api_key))
        try:
            r = self._http.get(path, params={**params, "api_key": self.config.api_key})
        except httpx.HTTPError as e:
            logger.warning("[catalog.error] %s: %s", path, e)
            raise DataUnavailable(f"NeoWs request failed: {e}") from e

        if r.status_code == 404:
            raise ObjectNotFound(path)
        if r.is_error:
            logger.warning("[catalog.error] %s status=%s", path, r.status_code)
            raise DataUnavailable(f"NeoWs returned HTTP {r.status_code}", status_code=r.status_code)
        try:
            data = r.json()
        except ValueError as e:
            raise DataUnavailable(f"NeoWs returned non-JSON: {e}") from e
        if not isinstance(data, dict):
            raise DataUnavailable("NeoWs returned an unexpected payload.")

        self.cache.set(cache_key, data)
        return data

    def feed_today(self, limit: Optional[int] = None) -> list[CatalogObject]:
        """Today's objects, closest approach first, truncated to ``limit``."""
        data = self._get_json("/feed/today", {"detailed": "false"})
        by_date = data.get("near_earth_objects")
        if not isinstance(by_date, dict):
            raise DataUnavailable("NeoWs feed payload missing 'near_earth_objects'.")

        objs = []
        for day in by_date.values():
            for rec in (day if isinstance(day, list) else []):
                if not isinstance(rec, dict):
                    continue
                try:
                    objs.append(catalog_object_from_record(rec, self.config.density_kgpm3))
                except InvalidInput as e:
                    logger.warning("[catalog.skip] id=%s: %s", rec.get("id"), e)
        objs.sort(key=lambda o: (not o.has_miss_distance, o.observation.miss_distance_km))
        n = self.config.feed_limit if limit is None else limit
        logger.info("[catalog.feed] objects=%d returning=%d", len(objs), min(n, len(objs)))
        return objs[:n]

    def lookup(self, neo_id: str) -> CatalogObject:
        data = self._get_json(f"/neo/{neo_id}", {})
        try:
            return catalog_object_from_record(data, self.config.density_kgpm3)
        except InvalidInput as e:
            raise DataUnavailable(f"NeoWs record {neo_id} is malformed: {e}") from e
