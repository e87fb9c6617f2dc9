"""
Unit Tests - FreeToGame Catalog
"""
import httpx
import pytest

from marketplace.config.settings import CatalogSettings
from marketplace.services.catalog import (
    CatalogError,
    FreeToGameClient,
    GameNotFoundError,
    filter_games,
    game_to_product,
)


class TestFilterGames:
    """Tests for filter_games"""

    def test_no_filters(self, sample_games):
        assert filter_games(sample_games) == sample_games

    def test_name_is_case_insensitive(self, sample_games):
        matches = filter_games(sample_games, name="overWATCH")

        assert [game["id"] for game in matches] == [540]

    def test_about_matches_description(self, sample_games):
        matches = filter_games(sample_games, about="battle royale")

        assert [game["id"] for game in matches] == [452, 516]

    def test_about_matches_genre(self, sample_games):
        matches = filter_games(sample_games, about="mmorpg")

        assert [game["id"] for game in matches] == [11]

    def test_free_games_match_any_price(self, sample_games):
        assert len(filter_games(sample_games, price="0")) == len(sample_games)

    def test_unparseable_price_is_ignored(self, sample_games):
        assert len(filter_games(sample_games, price="cheap")) == len(sample_games)

    def test_priced_entries_are_filtered(self):
        games = [{"id": 1, "title": "A", "price": "15"}, {"id": 2, "title": "B"}]

        assert [game["id"] for game in filter_games(games, price="10")] == [2]

    def test_filters_combine(self, sample_games):
        matches = filter_games(sample_games, name="pubg", about="shooter")

        assert [game["id"] for game in matches] == [516]


class TestGameToProduct:
    """Tests for game_to_product"""

    def test_product_shape(self, sample_games):
        product = game_to_product(sample_games[0])

        assert product["id"] == "game_452"
        assert product["name"] == "Call Of Duty: Warzone"
        assert product["about"] == sample_games[0]["short_description"]
        assert product["price"] == 0
        assert product["is_free_to_play"] is True
        assert product["publisher"] == "Activision"

    def test_missing_fields(self):
        product = game_to_product({"id": 1})

        assert product["id"] == "game_1"
        assert product["name"] is None


class TestFreeToGameClient:
    """Tests for FreeToGameClient against a mocked upstream"""

    @pytest.fixture
    def make_client(self, fake_catalog):
        def _make():
            return FreeToGameClient(CatalogSettings(), transport=fake_catalog.transport)
        return _make

    @pytest.mark.asyncio
    async def test_list_games(self, make_client, fake_catalog, sample_games):
        client = make_client()
        games = await client.list_games(platform="pc", sort_by="popularity")
        await client.close()

        assert len(games) == len(sample_games)
        request = fake_catalog.requests[0]
        assert request.url.path == "/api/games"
        assert request.url.params["platform"] == "pc"
        assert request.url.params["sort-by"] == "popularity"
        assert "category" not in request.url.params

    @pytest.mark.asyncio
    async def test_tag_uses_filter_endpoint(self, make_client, fake_catalog):
        client = make_client()
        await client.list_games(tag="3d.mmorpg", category="shooter", sort_by="release-date")
        await client.close()

        request = fake_catalog.requests[0]
        assert request.url.path == "/api/filter"
        assert request.url.params["tag"] == "3d.mmorpg"
        assert "category" not in request.url.params
        assert "sort-by" not in request.url.params
        assert request.url.params["sort"] == "release-date"

    @pytest.mark.asyncio
    async def test_get_game(self, make_client, fake_catalog):
        client = make_client()
        game = await client.get_game(540)
        await client.close()

        assert game["title"] == "Overwatch 2"
        assert fake_catalog.requests[0].url.params["id"] == "540"

    @pytest.mark.asyncio
    async def test_unknown_game(self, make_client):
        client = make_client()
        with pytest.raises(GameNotFoundError):
            await client.get_game(1)
        await client.close()

    @pytest.mark.asyncio
    async def test_upstream_error(self, make_client, fake_catalog):
        fake_catalog.fail_with(503)
        client = make_client()
        with pytest.raises(CatalogError) as exc_info:
            await client.list_games()
        await client.close()

        assert exc_info.value.status_code == 503
        assert "503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_network_error(self, make_client, fake_catalog):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        fake_catalog.handler = refuse
        client = make_client()
        with pytest.raises(CatalogError):
            await client.list_games()
        await client.close()

    @pytest.mark.asyncio
    async def test_invalid_json(self, make_client, fake_catalog):
        fake_catalog.handler = lambda request: httpx.Response(200, content=b"<html>")
        client = make_client()
        with pytest.raises(CatalogError):
            await client.list_games()
        await client.close()
