"""
FreeToGame Catalog Client

Read-only client for the FreeToGame public API, plus the helpers that turn
catalog entries into product-shaped rows for the combined product search.
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog
from fastapi import Request

from marketplace.config.settings import CatalogSettings

logger = structlog.get_logger(__name__)

GAME_ID_PREFIX = "game_"
API_SOURCE = "FreeToGame API"


class CatalogError(Exception):
    """Catalog request failed (network error or non-2xx response)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GameNotFoundError(CatalogError):
    """Catalog has no game with the requested id"""


class FreeToGameClient:
    """
    Async client for https://www.freetogame.com/api.

    No retries: a failed call raises CatalogError and the caller decides
    whether to surface it or fall back.

    Example:
        client = FreeToGameClient(settings.catalog)
        games = await client.list_games(platform="pc")
        await client.close()
    """

    def __init__(
        self,
        settings: CatalogSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.base_url.rstrip("/"),
            timeout=settings.timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        params = {key: value for key, value in (params or {}).items() if value not in (None, "")}
        logger.info("Calling FreeToGame API", path=path, params=params)

        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise CatalogError(f"FreeToGame API error: {e}") from e

        if response.status_code == 404:
            raise GameNotFoundError("FreeToGame API error: 404 Not Found", status_code=404)
        if not response.is_success:
            raise CatalogError(
                f"FreeToGame API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CatalogError(f"FreeToGame API error: invalid JSON ({e})") from e

    async def list_games(
        self,
        platform: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        List games, optionally filtered.

        Tags (dot separated, e.g. ``3d.mmorpg.fantasy``) go through the
        ``/filter`` endpoint, everything else through ``/games``.
        """
        if tag:
            # /filter has no category parameter and names its sort key "sort"
            return await self._get("/filter", {"tag": tag, "platform": platform, "sort": sort_by})
        return await self._get(
            "/games",
            {"platform": platform, "category": category, "sort-by": sort_by},
        )

    async def get_game(self, game_id: int) -> Dict[str, Any]:
        """Fetch one game's details."""
        return await self._get("/game", {"id": game_id})


def filter_games(
    games: List[Dict[str, Any]],
    name: Optional[str] = None,
    about: Optional[str] = None,
    price: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Apply the product search filters to catalog entries.

    - ``name``: case-insensitive substring of the title
    - ``about``: case-insensitive substring of the short description or genre
    - ``price``: maximum price; entries without a price are free and always
      match, an unparseable value disables the filter
    """
    if name:
        needle = name.lower()
        games = [game for game in games if needle in (game.get("title") or "").lower()]

    if about:
        needle = about.lower()
        games = [
            game for game in games
            if needle in (game.get("short_description") or "").lower()
            or needle in (game.get("genre") or "").lower()
        ]

    max_price = _parse_price(price)
    if max_price is not None:
        games = [game for game in games if _game_price(game) <= max_price]

    return games


def _parse_price(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _game_price(game: Dict[str, Any]) -> float:
    parsed = _parse_price(game.get("price"))
    return parsed if parsed is not None else 0.0


def game_to_product(game: Dict[str, Any]) -> Dict[str, Any]:
    """Reshape a catalog entry into the product representation."""
    return {
        "id": f"{GAME_ID_PREFIX}{game.get('id')}",
        "name": game.get("title"),
        "about": game.get("short_description"),
        "price": 0,
        "game_url": game.get("game_url"),
        "genre": game.get("genre"),
        "platform": game.get("platform"),
        "thumbnail": game.get("thumbnail"),
        "publisher": game.get("publisher"),
        "developer": game.get("developer"),
        "release_date": game.get("release_date"),
        "is_free_to_play": True,
    }


def get_catalog(request: Request) -> FreeToGameClient:
    """FastAPI dependency returning the application's catalog client."""
    return request.app.state.catalog
