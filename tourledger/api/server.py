"""
tourledger/api/server.py - FastAPI front end for the points ledger.

Endpoints (query-string parameters, GET or POST):
    /fund                 Fund a player, creating them if new
    /take                 Withdraw points from a player
    /announceTournament   Announce a tournament with an entry deposit
    /joinTournament       Join with a leader and optional repeated backerId
    /resultTournament     Settle a tournament (tournamentId / playerId optional)
    /balance              Player balance (GET)
    /reset                Clear every domain
    /health               Liveness check (GET)
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from ..errors import InvalidArgumentError, TourLedgerError
from ..workflows import TourLedger

logger = logging.getLogger(__name__)

_ledger: Optional[TourLedger] = None


def get_ledger() -> TourLedger:
    assert _ledger is not None, "Ledger not initialized"
    return _ledger


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _ledger
    owned = _ledger is None
    if owned:
        database_url = getattr(app.state, "database_url", None)
        _ledger = TourLedger.from_url(database_url)
        logger.info(f"Ledger initialized: {database_url or 'DB_URL'}")
    yield
    if owned:
        _ledger = None


app = FastAPI(title="Tour Ledger", lifespan=lifespan)


@app.exception_handler(TourLedgerError)
async def _ledger_error_handler(request: Request, exc: TourLedgerError) -> JSONResponse:
    logger.info(f"{request.url.path}: {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _parse_int(name: str, raw: Optional[str]) -> int:
    if raw is None or raw == "":
        raise InvalidArgumentError(f"{name} is required")
    try:
        return int(raw)
    except ValueError:
        raise InvalidArgumentError(f"{name} must be an integer, got {raw!r}") from None


# ======================================================================
# Players
# ======================================================================


@app.api_route("/fund", methods=["GET", "POST"])
def fund_points(
    player_id: str = Query("", alias="playerId"),
    points: Optional[str] = Query(None),
) -> dict[str, Any]:
    """Fund ``playerId`` with ``points``. Unknown players are created."""
    player = get_ledger().fund(player_id, _parse_int("points", points))
    return player.to_json()


@app.api_route("/take", methods=["GET", "POST"])
def take_points(
    player_id: str = Query("", alias="playerId"),
    points: Optional[str] = Query(None),
) -> dict[str, Any]:
    """Take ``points`` from ``playerId``'s account."""
    player = get_ledger().take(player_id, _parse_int("points", points))
    return player.to_json()


@app.get("/balance")
def balance(player_id: str = Query("", alias="playerId")) -> dict[str, Any]:
    return {"playerId": player_id, "balance": get_ledger().balance(player_id)}


# ======================================================================
# Tournaments
# ======================================================================


@app.api_route("/announceTournament", methods=["GET", "POST"])
def announce_tournament(
    tournament_id: str = Query("", alias="tournamentId"),
    deposit: Optional[str] = Query(None),
) -> dict[str, Any]:
    tournament = get_ledger().announce(tournament_id, _parse_int("deposit", deposit))
    return tournament.to_json()


@app.api_route("/joinTournament", methods=["GET", "POST"])
def join_tournament(
    tournament_id: str = Query("", alias="tournamentId"),
    player_id: str = Query("", alias="playerId"),
    backer_ids: list[str] = Query([], alias="backerId"),
) -> dict[str, Any]:
    """Join ``playerId`` into a tournament, backed by each ``backerId``."""
    outcome = get_ledger().join(tournament_id, player_id, backer_ids)
    return outcome.to_json()


@app.api_route("/resultTournament", methods=["GET", "POST"])
def result_tournament(
    tournament_id: Optional[str] = Query(None, alias="tournamentId"),
    player_id: Optional[str] = Query(None, alias="playerId"),
) -> dict[str, Any]:
    """Settle a tournament.

    Either parameter may be omitted; the missing tournament or winner is then
    picked at random among the eligible candidates.
    """
    result = get_ledger().result(tournament_id or None, player_id or None)
    return result.to_json()


# ======================================================================
# Administration
# ======================================================================


@app.api_route("/reset", methods=["GET", "POST"])
def reset() -> dict[str, Any]:
    get_ledger().reset()
    return {"success": True}


@app.get("/health")
def health() -> dict[str, Any]:
    get_ledger()
    return {"status": "ok"}
