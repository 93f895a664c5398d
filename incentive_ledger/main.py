import uvicorn
from fastapi import FastAPI

from incentive_ledger.api.routes.health import router as health_router
from incentive_ledger.api.routes.internal_challenges import router as internal_challenges_router
from incentive_ledger.api.routes.internal_incentives import router as internal_incentives_router
from incentive_ledger.api.routes.internal_points import router as internal_points_router
from incentive_ledger.api.routes.internal_rewards import router as internal_rewards_router
from incentive_ledger.core.config import get_settings
from incentive_ledger.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Incentive Ledger API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.include_router(health_router)
    app.include_router(internal_points_router)
    app.include_router(internal_rewards_router)
    app.include_router(internal_challenges_router)
    app.include_router(internal_incentives_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "incentive_ledger.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
