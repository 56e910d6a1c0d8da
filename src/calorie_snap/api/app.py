"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from calorie_snap.api.models import RecognizeFoodRequest, SaveMealRequest
from calorie_snap.app_logging import configure_logging
from calorie_snap.containers import AppContainer
from calorie_snap.domain.errors import (
    InvalidInputError,
    RecognitionDeclinedError,
    RecognitionError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/recognize-food", response_model=None)
    async def recognize_food(
        body: RecognizeFoodRequest, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Recognize foods in a photo and return confidence-annotated entries."""
        state_container: AppContainer = request.app.state.container
        try:
            result = await state_container.recognition_service.recognize(body.image)
        except RecognitionError as exc:
            logger.warning("Recognition failed (%s): %s", exc.kind, exc.message)
            return JSONResponse(
                status_code=_status_for(exc), content=_error_payload(exc)
            )
        return result.to_dict()

    @app.post("/api/meals")
    async def save_meal(body: SaveMealRequest, request: Request) -> dict[str, object]:
        """Persist reviewed entries against the user's daily log."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.meal_service.save_entries(
            user_id=body.user_id,
            entries=[food.to_domain() for food in body.foods],
            meal_type=body.meal_type,
            entry_date=body.entry_date,
        )
        return {
            "saved": summary.saved,
            "library_updates": summary.library_updates,
            "total_calories": summary.total_calories,
        }

    return app


def _status_for(exc: RecognitionError) -> int:
    if isinstance(exc, InvalidInputError | RecognitionDeclinedError):
        return 400
    return 500


def _error_payload(exc: RecognitionError) -> dict[str, object]:
    payload: dict[str, object] = {"error": exc.message, "kind": exc.kind}
    if isinstance(exc, RecognitionDeclinedError) and exc.suggestion:
        payload["suggestion"] = exc.suggestion
    return payload
