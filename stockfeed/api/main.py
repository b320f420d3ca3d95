from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from stockfeed.api.deps import get_engine
from stockfeed.api.routes.health import router as health_router
from stockfeed.api.routes.prices import router as prices_router


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # fail fast if the store is unreachable + ensure the table exists
    get_engine()
    yield


app = FastAPI(title="stockfeed API", version="0.1.0", lifespan=lifespan)

app.include_router(health_router)
app.include_router(prices_router)
