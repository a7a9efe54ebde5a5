from __future__ import annotations

import contextlib
from http import HTTPStatus
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from ledger.exceptions import GameFinishedError, InvalidScoreError, LedgerError, NotFoundError
from ledger.service import LedgerService
from ledger.settings import LedgerSettings
from shared.dal.exceptions import StoreError
from shared.db import Database
from shared.logging import setup_logging
from tracker.server.settings import TrackerServerSettings
from tracker.views.handlers import (
    BadRequestError,
    add_players,
    add_tally_round,
    create_game,
    create_profile,
    delete_game,
    delete_player,
    finish_game,
    game_progression,
    get_game,
    list_games,
    list_profiles,
    player_history,
    record_score,
    statistics,
    toggle_token,
)

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request

# Most specific first: the handler lookup walks the exception's MRO, so
# LedgerError only catches what the subclasses above it do not.
_ERROR_STATUS: dict[type[Exception], HTTPStatus] = {
    BadRequestError: HTTPStatus.BAD_REQUEST,
    ValidationError: HTTPStatus.UNPROCESSABLE_ENTITY,
    InvalidScoreError: HTTPStatus.UNPROCESSABLE_ENTITY,
    NotFoundError: HTTPStatus.NOT_FOUND,
    GameFinishedError: HTTPStatus.CONFLICT,
    LedgerError: HTTPStatus.BAD_REQUEST,
    StoreError: HTTPStatus.SERVICE_UNAVAILABLE,
}


async def _error_response(request: Request, exc: Exception) -> JSONResponse:
    status = next(s for exc_type, s in _ERROR_STATUS.items() if isinstance(exc, exc_type))
    if status == HTTPStatus.SERVICE_UNAVAILABLE:
        logger.error("store unavailable", path=request.url.path, error=str(exc))
    return JSONResponse({"error": str(exc)}, status_code=status)


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


def create_app(
    settings: TrackerServerSettings | None = None,
    ledger_settings: LedgerSettings | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = TrackerServerSettings()
    if ledger_settings is None:
        ledger_settings = LedgerSettings()

    routes = [
        Route("/health", health, methods=["GET"], name="health"),
        Route("/games", list_games, methods=["GET"], name="list_games"),
        Route("/games", create_game, methods=["POST"], name="create_game"),
        Route("/games/{game_id}", get_game, methods=["GET"], name="get_game"),
        Route("/games/{game_id}", delete_game, methods=["DELETE"], name="delete_game"),
        Route("/games/{game_id}/finish", finish_game, methods=["POST"], name="finish_game"),
        Route("/games/{game_id}/players", add_players, methods=["POST"], name="add_players"),
        Route("/games/{game_id}/tokens", add_tally_round, methods=["POST"], name="add_tally_round"),
        Route("/games/{game_id}/progression", game_progression, methods=["GET"], name="game_progression"),
        Route("/players/{player_id}", delete_player, methods=["DELETE"], name="delete_player"),
        Route("/players/{player_id}/scores", record_score, methods=["POST"], name="record_score"),
        Route("/players/{player_id}/history", player_history, methods=["GET"], name="player_history"),
        Route("/tokens/{token_id}/toggle", toggle_token, methods=["POST"], name="toggle_token"),
        Route("/profiles", list_profiles, methods=["GET"], name="list_profiles"),
        Route("/profiles", create_profile, methods=["POST"], name="create_profile"),
        Route("/stats", statistics, methods=["GET"], name="statistics"),
    ]

    db = Database(settings.database_path)
    db.connect()

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:
        yield
        db.close()

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers=dict.fromkeys(_ERROR_STATUS, _error_response),
    )
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )

    app.state.db = db
    app.state.settings = settings
    app.state.ledger_service = LedgerService.for_database(db, ledger_settings)

    logger.info("tracker server ready", database_path=settings.database_path)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory tracker.server.app:get_app."""
    s = TrackerServerSettings()
    setup_logging(log_dir=s.log_dir)
    return create_app(settings=s)
