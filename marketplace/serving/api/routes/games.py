"""
Free-to-Play Games API Endpoints

Proxies the FreeToGame catalog. Upstream failures surface as 500 errors
carrying the upstream message.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from marketplace.serving.api.errors import BadRequestError, NotFoundError, UpstreamError
from marketplace.serving.api.responses import GameListResponse, GameResponse
from marketplace.services.catalog import (
    API_SOURCE,
    CatalogError,
    FreeToGameClient,
    GameNotFoundError,
    get_catalog,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("", response_model=GameListResponse)
async def list_games(
    platform: Optional[str] = Query(None, description="pc, browser or all"),
    category: Optional[str] = Query(None, description="mmorpg, shooter, pvp, ..."),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="release-date, popularity, alphabetical or relevance"),
    tag: Optional[str] = Query(None, description="Dot separated tags, e.g. 3d.mmorpg.fantasy.pvp"),
    catalog: FreeToGameClient = Depends(get_catalog),
) -> GameListResponse:
    """List free-to-play games from the FreeToGame catalog."""
    try:
        games = await catalog.list_games(
            platform=platform,
            category=category,
            sort_by=sort_by,
            tag=tag,
        )
    except CatalogError as e:
        logger.error("Failed to fetch free-to-play games", error=str(e))
        raise UpstreamError("Failed to fetch games", details=[str(e)]) from e

    if not isinstance(games, list):
        raise UpstreamError("Failed to fetch games", details=["FreeToGame API error: unexpected payload"])

    return GameListResponse(
        games=games,
        total=len(games),
        filters={
            "platform": platform or "all",
            "category": category or "all",
            "sortBy": sort_by or "relevance",
            "tag": tag or None,
        },
        apiSource=API_SOURCE,
    )


@router.get("/{game_id}", response_model=GameResponse)
async def get_game(
    game_id: str,
    catalog: FreeToGameClient = Depends(get_catalog),
) -> GameResponse:
    """Get one game's details from the FreeToGame catalog."""
    if not game_id.isdigit():
        raise BadRequestError("Invalid game id")

    try:
        game = await catalog.get_game(int(game_id))
    except GameNotFoundError as e:
        raise NotFoundError("Game not found") from e
    except CatalogError as e:
        logger.error("Failed to fetch game", game_id=game_id, error=str(e))
        raise UpstreamError("Failed to fetch game", details=[str(e)]) from e

    if not isinstance(game, dict):
        raise UpstreamError("Failed to fetch game", details=["FreeToGame API error: unexpected payload"])

    return GameResponse(game=game, apiSource=API_SOURCE)
