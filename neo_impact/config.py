from __future__ import annotations
from dataclasses import dataclass
from math import isfinite
import os

from dotenv import load_dotenv

from .errors import InvalidInput
from .impact_model import DEFAULT_DENSITY_KGPM3, R_EARTH_KM

NEO_API_BASE = "https://api.nasa.gov/neo/rest/v1"


@dataclass(frozen=True)
class CatalogConfig:
    api_key: str = "DEMO_KEY"
    base_url: str = NEO_API_BASE
    timeout_s: float = 10.0
    cache_ttl_s: float = 300.0
    feed_limit: int = 20
    density_kgpm3: float = DEFAULT_DENSITY_KGPM3
    impact_threshold_km: float = R_EARTH_KM

    @classmethod
    def from_env(cls) -> "CatalogConfig":
        """Read settings from the environment (and a .env file if present)."""
        load_dotenv()
        d = cls()
        return cls(
            api_key=os.getenv("NASA_API_KEY") or d.api_key,
            base_url=os.getenv("NEO_API_BASE") or d.base_url,
            timeout_s=_env_number("NEO_HTTP_TIMEOUT", d.timeout_s),
            cache_ttl_s=_env_number("NEO_CACHE_TTL", d.cache_ttl_s),
            feed_limit=int(_env_number("NEO_FEED_LIMIT", d.feed_limit)),
            density_kgpm3=_env_number("NEO_DENSITY_KGPM3", d.density_kgpm3),
            impact_threshold_km=_env_number("NEO_IMPACT_THRESHOLD_KM", d.impact_threshold_km),
        )


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        v = float(raw)
    except ValueError as e:
        raise InvalidInput(f"{name}={raw!r} is not a number") from e
    if not isfinite(v) or v <= 0.0:
        raise InvalidInput(f"{name} must be a finite number > 0, got {v}")
    return v


def mask_key(s: str | None) -> str | None:
    if not s:
        return s
    return s[:3] + "***" + s[-3:] if len(s) > 6 else "***"
