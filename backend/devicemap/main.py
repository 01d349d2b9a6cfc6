import logging
import random

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .core.config import settings
from .core.logging import configure_logging
from .api import cities, devices
from .services.seed import seed_demo_data
from .services.storage import get_storage

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
)

app.include_router(cities.router)
app.include_router(devices.router)

@app.on_event("startup")
def on_startup():
    storage = get_storage()
    if settings.SEED_DEMO_DATA:
        rng = random.Random(settings.SEED_RANDOM_SEED) if settings.SEED_RANDOM_SEED is not None else None
        seed_demo_data(storage, rng=rng)
    logger.info("%s ready", settings.APP_NAME)

@app.get("/health")
def health(): return {"ok": True}
