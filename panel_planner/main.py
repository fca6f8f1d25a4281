"""Overhead Panel Planner — build tracking backend

Backend responsibilities:
  1. BOM allocation: pack a panel section's pin needs onto free board pins
  2. BOM apply: write the plan as pin assignments in one transaction
  3. Power budget: scenario-based PSU demand and utilization
  4. Board pin availability
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from panel_planner.config import get_settings
from panel_planner.db.session import init_db, close_db, is_db_available
from panel_planner.routers import bom, boards, power_budget


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: check DB. Shutdown: close DB pool."""
    await init_db()
    yield
    await close_db()


def create_app() -> FastAPI:
    settings = get_settings()

    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        description=(
            "Pin allocation and power budget engine for a home-built "
            "aircraft overhead panel."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ─── BOM allocation ───
    application.include_router(bom.router, prefix="/api/bom", tags=["BOM"])

    # ─── Power budget ───
    application.include_router(
        power_budget.router, prefix="/api/power-budget", tags=["Power Budget"]
    )

    # ─── Boards ───
    application.include_router(boards.router, prefix="/api/boards", tags=["Boards"])

    @application.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "service": "overhead-panel-planner",
            "version": "0.1.0",
            "database": is_db_available(),
        }

    return application


app = create_app()
