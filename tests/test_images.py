"""Tests for the PSA image client."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from certscan.core.constants import BACKOFF_S, PLACEHOLDER_IMAGE
from certscan.images.psa import PSAImageClient
from certscan.utils.error_handler import CredentialsExpired

IMAGES_URL = "https://images.test/GetImagesByCertNumber/"


@pytest.fixture
def client():
    return PSAImageClient(images_url=IMAGES_URL, timeout_s=5)


class TestGetImages:
    """Test image selection and fallbacks."""

    @pytest.mark.asyncio
    async def test_picks_first_front_and_back(self, client, credentials, fake_session):
        client.session = fake_session((200, [
            {"IsFrontImage": False, "ImageURL": "https://img/back-1.jpg"},
            {"IsFrontImage": True, "ImageURL": "https://img/front-1.jpg"},
            {"IsFrontImage": True, "ImageURL": "https://img/front-2.jpg"},
            {"IsFrontImage": False, "ImageURL": "https://img/back-2.jpg"},
        ]))

        pair = await client.get_images("12345678", credentials)

        assert pair.front_image_url == "https://img/front-1.jpg"
        assert pair.back_image_url == "https://img/back-1.jpg"

    @pytest.mark.asyncio
    async def test_request_uses_cert_and_bearer_token(self, client, credentials, fake_session):
        client.session = fake_session((200, []))

        await client.get_images("12345678", credentials)

        call = client.session.request.call_args
        assert call.args == ("GET", "https://images.test/GetImagesByCertNumber/12345678")
        assert call.kwargs["headers"]["Authorization"] == "Bearer psa-1"

    @pytest.mark.asyncio
    async def test_malformed_response_uses_placeholders(self, client, credentials, fake_session):
        client.session = fake_session((200, {"Message": "unexpected"}))

        pair = await client.get_images("12345678", credentials)

        assert pair.front_image_url == PLACEHOLDER_IMAGE
        assert pair.back_image_url == PLACEHOLDER_IMAGE

    @pytest.mark.asyncio
    async def test_null_body_uses_placeholders(self, client, credentials, fake_session):
        client.session = fake_session((200, None))

        pair = await client.get_images("12345678", credentials)

        assert pair.front_image_url == PLACEHOLDER_IMAGE
        assert pair.back_image_url == PLACEHOLDER_IMAGE

    @pytest.mark.asyncio
    async def test_missing_side_uses_placeholder(self, client, credentials, fake_session):
        client.session = fake_session((200, [
            {"IsFrontImage": True, "ImageURL": "https://img/front.jpg"},
        ]))

        pair = await client.get_images("12345678", credentials)

        assert pair.front_image_url == "https://img/front.jpg"
        assert pair.back_image_url == PLACEHOLDER_IMAGE

    @pytest.mark.asyncio
    async def test_empty_url_uses_placeholder(self, client, credentials, fake_session):
        client.session = fake_session((200, [
            {"IsFrontImage": True, "ImageURL": ""},
            {"IsFrontImage": False},
        ]))

        pair = await client.get_images("12345678", credentials)

        assert pair.front_image_url == PLACEHOLDER_IMAGE
        assert pair.back_image_url == PLACEHOLDER_IMAGE

    @pytest.mark.asyncio
    async def test_401_raises_credentials_expired(self, client, credentials, fake_session):
        client.session = fake_session((401, None))

        with pytest.raises(CredentialsExpired) as exc_info:
            await client.get_images("12345678", credentials)

        assert exc_info.value.service == "images"


class TestServiceFailures:
    """Failure statuses other than 401 still produce a ledger-ready pair."""

    @pytest.mark.asyncio
    async def test_not_found_uses_placeholders(self, client, credentials, fake_session):
        client.session = fake_session((404, {"Message": "Cert not found"}))

        pair = await client.get_images("12345678", credentials)

        assert pair.front_image_url == PLACEHOLDER_IMAGE
        assert pair.back_image_url == PLACEHOLDER_IMAGE
        assert client.session.request.call_count == 1

    @pytest.mark.asyncio
    async def test_server_error_after_backoff_uses_placeholders(self, client, credentials, fake_session):
        client.session = fake_session(*[(503, None)] * (len(BACKOFF_S) + 1))

        with patch("certscan.utils.http.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            pair = await client.get_images("12345678", credentials)

        assert pair.front_image_url == PLACEHOLDER_IMAGE
        assert pair.back_image_url == PLACEHOLDER_IMAGE
        assert client.session.request.call_count == len(BACKOFF_S) + 1
        assert mock_sleep.await_count == len(BACKOFF_S)

    @pytest.mark.asyncio
    async def test_body_that_is_not_json_uses_placeholders(self, client, credentials):
        response = MagicMock()
        response.status = 200
        response.json = AsyncMock(side_effect=json.JSONDecodeError("Expecting value", "<html>", 0))
        context_manager = MagicMock()
        context_manager.__aenter__ = AsyncMock(return_value=response)
        context_manager.__aexit__ = AsyncMock(return_value=None)
        session = MagicMock()
        session.closed = False
        session.request.return_value = context_manager
        client.session = session

        pair = await client.get_images("12345678", credentials)

        assert pair.front_image_url == PLACEHOLDER_IMAGE
        assert pair.back_image_url == PLACEHOLDER_IMAGE
