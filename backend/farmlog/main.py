import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from farmlog.config import settings
from farmlog.middleware.exceptions import register_exception_handlers
from farmlog.middleware.user import UserContextMiddleware
from farmlog.routers import (
    calendar,
    chat,
    crops,
    dashboard,
    data,
    farm_areas,
    growth_records,
    health,
    tasks,
    weather,
)
from farmlog.services.scheduler import lifespan


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


configure_logging()

app = FastAPI(
    title="FarmLog",
    description="Crop record keeping: crops, growth records, tasks, calendar and data transfer",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (last added is outermost) ─────────────────────
# User context (innermost)
app.add_middleware(UserContextMiddleware)

# CORS wraps user context so its 400 responses carry CORS headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)

# User-scoped (X-User-Id header, default user when absent)
app.include_router(crops.router, prefix="/api/crops", tags=["crops"])
app.include_router(growth_records.router, prefix="/api/growth-records", tags=["growth-records"])
app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
app.include_router(farm_areas.router, prefix="/api/farm-areas", tags=["farm-areas"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(calendar.router, prefix="/api/calendar", tags=["calendar"])
app.include_router(data.router, prefix="/api/data", tags=["data"])
app.include_router(weather.router, prefix="/api/weather", tags=["weather"])
app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
