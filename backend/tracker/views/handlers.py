"""JSON request handlers for the tracker API."""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from starlette.responses import JSONResponse, Response

from ledger.formatting import format_game_title
from ledger.ledger import parse_points
from tracker.types import AddPlayersRequest, CreateGameRequest, CreateProfileRequest, RecordScoreRequest

if TYPE_CHECKING:
    from pydantic import BaseModel
    from starlette.requests import Request

    from ledger.service import LedgerService
    from shared.dal.models import Game

_ACTIVE_FILTER = {"true": True, "false": False}


class BadRequestError(Exception):
    """The request body or query string could not be understood."""


def _service(request: Request) -> LedgerService:
    return request.app.state.ledger_service


async def _read_body(request: Request, model: type[BaseModel]) -> Any:  # noqa: ANN401
    """Parse the JSON body into the given request model. An empty body counts as {}."""
    raw_body = await request.body()
    if not raw_body.strip():
        body: Any = {}
    else:
        try:
            body = json.loads(raw_body)
        except ValueError as e:
            raise BadRequestError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise BadRequestError("JSON body must be an object")
    return model.model_validate(body)


def _game_json(request: Request, game: Game) -> dict[str, Any]:
    default = _service(request).settings.default_game_name
    return {**game.model_dump(mode="json"), "title": format_game_title(game, default=default)}


async def list_games(request: Request) -> JSONResponse:
    """GET /games?active=true|false - games newest first."""
    raw_filter = request.query_params.get("active")
    if raw_filter is not None and raw_filter.lower() not in _ACTIVE_FILTER:
        raise BadRequestError("active must be 'true' or 'false'")
    is_active = _ACTIVE_FILTER[raw_filter.lower()] if raw_filter is not None else None
    games = await _service(request).list_games(is_active)
    return JSONResponse({"games": [_game_json(request, g) for g in games]})


async def create_game(request: Request) -> JSONResponse:
    req: CreateGameRequest = await _read_body(request, CreateGameRequest)
    game = await _service(request).create_game(req.name)
    return JSONResponse({"game": _game_json(request, game)}, status_code=HTTPStatus.CREATED)


async def get_game(request: Request) -> JSONResponse:
    """GET /games/{game_id} - players in rank order with their tokens."""
    standings = await _service(request).standings(request.path_params["game_id"])
    payload = standings.model_dump(mode="json")
    payload["game"] = _game_json(request, standings.game)
    return JSONResponse(payload)


async def delete_game(request: Request) -> Response:
    await _service(request).delete_game(request.path_params["game_id"])
    return Response(status_code=HTTPStatus.NO_CONTENT)


async def finish_game(request: Request) -> JSONResponse:
    penalties = await _service(request).finish_game(request.path_params["game_id"])
    return JSONResponse({"penalties": [e.model_dump(mode="json") for e in penalties]})


async def add_players(request: Request) -> JSONResponse:
    req: AddPlayersRequest = await _read_body(request, AddPlayersRequest)
    players = await _service(request).add_players(request.path_params["game_id"], req.names, req.profile_ids)
    return JSONResponse({"players": [p.model_dump(mode="json") for p in players]}, status_code=HTTPStatus.CREATED)


async def add_tally_round(request: Request) -> JSONResponse:
    tokens = await _service(request).add_tally_round(request.path_params["game_id"])
    return JSONResponse({"tokens": [t.model_dump(mode="json") for t in tokens]}, status_code=HTTPStatus.CREATED)


async def game_progression(request: Request) -> JSONResponse:
    series = await _service(request).progression(request.path_params["game_id"])
    return JSONResponse({"series": series})


async def delete_player(request: Request) -> Response:
    await _service(request).delete_player(request.path_params["player_id"])
    return Response(status_code=HTTPStatus.NO_CONTENT)


async def record_score(request: Request) -> JSONResponse:
    req: RecordScoreRequest = await _read_body(request, RecordScoreRequest)
    points = parse_points(req.points)
    recorded = await _service(request).record_score(request.path_params["player_id"], points, played=req.played)
    return JSONResponse(recorded.model_dump(mode="json"), status_code=HTTPStatus.CREATED)


async def player_history(request: Request) -> JSONResponse:
    ledger = await _service(request).player_ledger(request.path_params["player_id"])
    return JSONResponse(ledger.model_dump(mode="json"))


async def toggle_token(request: Request) -> JSONResponse:
    token = await _service(request).toggle_token(request.path_params["token_id"])
    return JSONResponse({"token": token.model_dump(mode="json")})


async def list_profiles(request: Request) -> JSONResponse:
    profiles = await _service(request).search_profiles(request.query_params.get("q", ""))
    return JSONResponse({"profiles": [p.model_dump(mode="json") for p in profiles]})


async def create_profile(request: Request) -> JSONResponse:
    """POST /profiles - returns the existing profile when the name is taken."""
    req: CreateProfileRequest = await _read_body(request, CreateProfileRequest)
    profile = await _service(request).find_or_create_profile(req.name)
    return JSONResponse({"profile": profile.model_dump(mode="json")})


async def statistics(request: Request) -> JSONResponse:
    rows = await _service(request).statistics()
    return JSONResponse({"leaderboard": [row.model_dump(mode="json") for row in rows]})
