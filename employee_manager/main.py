from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from employee_manager.api.v1.router import api_router
from employee_manager.core.config import settings
from employee_manager.services.employee_store import employee_store
from employee_manager.services.identity_service import identity_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    try:
        await employee_store.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize EmployeeStore — continuing without DB")
    try:
        await identity_service.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize IdentityService — continuing without auth")
    yield
    await employee_store.close()
    await identity_service.close()


app = FastAPI(
    title="Employee Manager API",
    description="Employee records backed by Cosmos DB, gated by Firebase Authentication",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Employee Manager API"}
