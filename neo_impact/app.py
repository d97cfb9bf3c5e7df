from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from typing import Optional
import logging

from .assessment import assess
from .catalog import NeoWsClient, CatalogObject
from .config import CatalogConfig
from .errors import DataUnavailable, InvalidInput, ObjectNotFound
from .impact_model import ImpactObservation, DEFAULT_DENSITY_KGPM3

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(message)s")
logger = logging.getLogger(__name__)

# -------------------------------
# Dependencies
# -------------------------------
_client: Optional[NeoWsClient] = None


def get_config() -> CatalogConfig:
    return CatalogConfig.from_env()


def get_client(config: CatalogConfig = Depends(get_config)) -> NeoWsClient:
    # one client (and cache) per process
    global _client
    if _client is None:
        _client = NeoWsClient(config)
    return _client


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _client
    yield
    if _client is not None:
        _client.close()
        _client = None


app = FastAPI(title="NEO impact assessment", version="1.0.0", lifespan=lifespan)


# -------------------------------
# Health
# -------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


# -------------------------------
# Impact assessment endpoints
# -------------------------------
class ObservationIn(BaseModel):
    diameter_km: float = Field(..., ge=0, description="Representative diameter in km")
    velocity_km_s: float = Field(..., ge=0, description="Relative approach speed in km/s")
    miss_distance_km: float = Field(..., ge=0, description="Geocentric miss distance in km")
    density_kgpm3: float = Field(DEFAULT_DENSITY_KGPM3, gt=0, description="Bulk density in kg/m^3")
    impact_threshold_km: Optional[float] = Field(None, gt=0, description="Override impact threshold (km)")


def _assessed(obj: CatalogObject, config: CatalogConfig) -> dict:
    out = obj.to_dict()
    out["assessment"] = obj.assess(config.impact_threshold_km).to_dict()
    return out


@app.post("/impact/assess")
def impact_assess(req: ObservationIn, config: CatalogConfig = Depends(get_config)):
    try:
        obs = ImpactObservation(
            diameter_km=req.diameter_km,
            velocity_km_s=req.velocity_km_s,
            miss_distance_km=req.miss_distance_km,
            density_kgpm3=req.density_kgpm3,
        )
        threshold = req.impact_threshold_km or config.impact_threshold_km
        return assess(obs, threshold).to_dict()
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.get("/neo/today")
def neo_today(limit: Optional[int] = Query(None, ge=1, le=200, description="Max objects, closest first"),
              client: NeoWsClient = Depends(get_client)):
    try:
        objs = client.feed_today(limit=limit)
    except DataUnavailable as e:
        raise HTTPException(status_code=502, detail=f"Catalog data unavailable: {e}")
    return {"count": len(objs), "objects": [_assessed(o, client.config) for o in objs]}


@app.get("/neo/{neo_id}/assess")
def neo_assess(neo_id: str, client: NeoWsClient = Depends(get_client)):
    try:
        obj = client.lookup(neo_id)
    except ObjectNotFound:
        raise HTTPException(status_code=404, detail=f"No catalog object with id {neo_id}.")
    except DataUnavailable as e:
        raise HTTPException(status_code=502, detail=f"Catalog data unavailable: {e}")
    return _assessed(obj, client.config)
