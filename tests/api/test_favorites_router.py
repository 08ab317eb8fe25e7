"""API tests for the favorites endpoints."""

import uuid

import pytest

from fair_directory.models import FavoritableType, UserFavorite

pytestmark = pytest.mark.asyncio

TOGGLE_URL = "/api/v1/favorites/toggle"
LIST_URL = "/api/v1/favorites"


class TestToggle:
    async def test_toggle_round_trip(self, client, catalog, headers_for):
        user = await catalog.user()
        vendor = await catalog.vendor("Sunny Crafts")
        body = {"type": "vendor", "id": str(vendor.id)}

        added = await client.post(TOGGLE_URL, json=body, headers=headers_for(user))
        assert added.status_code == 200
        assert added.json() == {"is_favorited": True}
        assert await catalog.count(UserFavorite, UserFavorite.user_id == user.id) == 1

        removed = await client.post(TOGGLE_URL, json=body, headers=headers_for(user))
        assert removed.json() == {"is_favorited": False}
        assert await catalog.count(UserFavorite, UserFavorite.user_id == user.id) == 0

    async def test_unknown_target_is_404(self, client, catalog, headers_for):
        user = await catalog.user()

        response = await client.post(
            TOGGLE_URL,
            json={"type": "event", "id": str(uuid.uuid4())},
            headers=headers_for(user),
        )

        assert response.status_code == 404

    async def test_unknown_kind_is_422(self, client, catalog, headers_for):
        user = await catalog.user()

        response = await client.post(
            TOGGLE_URL,
            json={"type": "booth", "id": str(uuid.uuid4())},
            headers=headers_for(user),
        )

        assert response.status_code == 422

    async def test_requires_token(self, client):
        response = await client.post(TOGGLE_URL, json={"type": "vendor", "id": str(uuid.uuid4())})

        assert response.status_code == 401

    async def test_non_uuid_subject_is_401(self, client, token_service):
        token = token_service.create_access_token(user_id="service-account", role="USER")

        response = await client.get(
            LIST_URL,
            params={"type": "venue"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401


class TestList:
    async def test_lists_ids_of_one_kind(self, client, catalog, headers_for):
        user = await catalog.user()
        venue, promoter = await catalog.fair_setup()
        await catalog.favorite(user, FavoritableType.VENUE, venue.id)
        await catalog.favorite(user, FavoritableType.PROMOTER, promoter.id)

        response = await client.get(LIST_URL, params={"type": "venue"}, headers=headers_for(user))

        assert response.status_code == 200
        assert response.json() == {"type": "venue", "ids": [str(venue.id)]}
