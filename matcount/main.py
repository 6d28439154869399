import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from matcount.core.config import settings
from matcount.core.errors import DomainError
from matcount.core.observability import (
    domain_exception_handler,
    http_exception_handler,
    log_event,
    request_logging_middleware,
    setup_observability,
    unhandled_exception_handler,
    validation_exception_handler,
)
from matcount.db.session import engine
from matcount.routers import admin, clients, costing, dashboard, inventory, materials

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description=(
        "Backend API for tracking solar installation materials.\n\n"
        "Stock moves through `/inventory`, dispatches and returns are recorded per client under "
        "`/clients/{id}/transactions`, and `/client-costing` prices what each client still holds."
    ),
    swagger_ui_parameters={
        "displayRequestDuration": True,
        "defaultModelsExpandDepth": 1,
    },
    openapi_tags=[
        {"name": "health", "description": "Service status and quick links."},
        {"name": "materials", "description": "Material catalog, categories and pricing."},
        {"name": "inventory", "description": "Stock adjustments, bulk fills, history and the inventory ledger."},
        {"name": "clients", "description": "Clients, their dispatch/return transactions and material usage."},
        {"name": "costing", "description": "Per-client costing snapshots and PDF export."},
        {"name": "dashboard", "description": "Stock and client summary metrics."},
        {"name": "admin", "description": "Backup, restore, demo data and stock re-projection."},
    ],
)

setup_observability()
app.middleware("http")(request_logging_middleware)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(DomainError, domain_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

cors_origins = settings.cors_origins or ["http://localhost:3000"]
allow_all_origins = "*" in cors_origins
env_value = settings.env.lower().strip()
allow_origin_regex = settings.cors_origin_regex

if (
    not allow_origin_regex
    and env_value in {"dev", "development", "staging", "stage"}
):
    # Local frontends run on dynamic localhost ports.
    allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all_origins else cors_origins,
    allow_origin_regex=allow_origin_regex,
    allow_credentials=not allow_all_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(materials.router)
app.include_router(inventory.router)
app.include_router(clients.router)
app.include_router(costing.router)
app.include_router(dashboard.router)
app.include_router(admin.router)


@app.get("/", tags=["health"])
def root():
    return {
        "app": settings.app_name,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health",
        "ready": "/ready",
    }


@app.get("/health", tags=["health"])
def health():
    return {"ok": True}


@app.get("/ready", tags=["health"])
def ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        log_event("readiness_failed", level=logging.WARNING, error=str(exc))
        return {"ok": False}
    return {"ok": True}
