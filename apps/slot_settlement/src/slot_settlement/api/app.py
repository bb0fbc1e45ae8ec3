"""FastAPI application factory for the settlement API."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from slot_settlement.api.error_handlers import register_error_handlers
from slot_settlement.api.routes import v1_router
from slot_settlement.core.settings import Settings, get_settings
from slot_settlement.db.models.slot_transfer import SlotTransfer
from slot_settlement.db.session import get_db_session

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API with health probes and the ``/v1`` routes."""

    settings = settings or get_settings()
    app = FastAPI(
        title="Slot Settlement API",
        version="0.1.0",
    )
    app.state.settings = settings

    @app.get("/health/live", include_in_schema=False)
    def health_live() -> dict[str, str]:
        return {"status": "alive"}

    @app.get("/health/ready", include_in_schema=False)
    def health_ready(
        db_session: Annotated[Session, Depends(get_db_session)],
    ) -> dict[str, str | int]:
        # Ready means the transfer log itself answers, not just the server.
        try:
            transfer_count = db_session.scalar(
                select(func.count()).select_from(SlotTransfer)
            )
        except SQLAlchemyError as exc:
            logger.warning("readiness_check_failed", exc_info=exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Transfer log is unavailable",
            ) from exc
        return {
            "status": "ready",
            "timezone": settings.app_timezone,
            "transfers": int(transfer_count or 0),
        }

    register_error_handlers(app)
    app.include_router(v1_router)
    logger.info(
        "app_created",
        extra={
            "timezone": settings.app_timezone,
            "operator_role": settings.operator_role,
        },
    )
    return app


app = create_app()
