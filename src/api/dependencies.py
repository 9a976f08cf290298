import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.workflow_service import PlannerBundle
from src.core.config import ApiSettings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_planner_bundle() -> PlannerBundle:
    settings = ApiSettings.from_env()
    bundle = PlannerBundle(settings)
    logger.info("Planner bundle initialised: %r", bundle)
    return bundle


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    try:
        yield
    finally:
        # Only close a bundle that was actually built during this process.
        if get_planner_bundle.cache_info().currsize:
            await get_planner_bundle().close()
