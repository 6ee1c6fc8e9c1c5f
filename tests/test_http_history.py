"""Test the REST client and history reads."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from hassdaemon_core import HassHttpClient, HistoryAccessor
from hassdaemon_core.errors import (
    HassConnectionError,
    HassResponseError,
    HassTimeout,
)

from .conftest import create_mock_response

START = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)
END = datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc)

HISTORY = [
    [
        {
            "entity_id": "light.kitchen",
            "state": "off",
            "attributes": {"friendly_name": "Kitchen"},
            "last_changed": "2024-06-01T08:00:00+00:00",
            "last_updated": "2024-06-01T08:00:00+00:00",
        },
        {"state": "on", "last_changed": "2024-06-01T18:30:00+00:00"},
    ]
]


def make_client(mock_session: MagicMock) -> HassHttpClient:
    return HassHttpClient(mock_session, "https://hass.local:8123/", "secret-token")


class TestHassHttpClient:
    """Test GET requests against /api."""

    async def test_get_sends_bearer_token(self, mock_session: MagicMock) -> None:
        client = make_client(mock_session)
        mock_session.get.return_value = create_mock_response(
            status=200, json_data={"message": "API running."}
        )

        assert await client.get("/") == {"message": "API running."}

        call_args = mock_session.get.call_args
        assert call_args.args[0] == "https://hass.local:8123/api/"
        assert call_args.kwargs["headers"] == {"Authorization": "Bearer secret-token"}
        assert call_args.kwargs["timeout"].total == 10.0

    async def test_non_200_raises_response_error(self, mock_session: MagicMock) -> None:
        client = make_client(mock_session)
        mock_session.get.return_value = create_mock_response(
            status=401, text_data="401: Unauthorized"
        )

        with pytest.raises(HassResponseError, match="401") as exc_info:
            await client.get("history/period")
        assert exc_info.value.status == 401

    async def test_timeout_raises_timeout_error(self, mock_session: MagicMock) -> None:
        client = make_client(mock_session)
        mock_session.get.side_effect = TimeoutError()

        with pytest.raises(HassTimeout, match="timed out"):
            await client.get("/history/period")

    async def test_client_error_raises_connection_error(
        self, mock_session: MagicMock
    ) -> None:
        client = make_client(mock_session)
        mock_session.get.side_effect = aiohttp.ClientConnectionError("refused")

        with pytest.raises(HassConnectionError):
            await client.get("/history/period")


class TestFetchHistory:
    """Test /api/history/period request shape."""

    async def test_range_request(self, mock_session: MagicMock) -> None:
        client = make_client(mock_session)
        mock_session.get.return_value = create_mock_response(status=200, json_data=HISTORY)

        data = await client.fetch_history("light.kitchen", start_time=START, end_time=END)

        assert data == HISTORY
        call_args = mock_session.get.call_args
        assert call_args.args[0] == (
            "https://hass.local:8123/api/history/period/2024-06-01T08:00:00+00:00"
        )
        assert call_args.kwargs["params"] == {
            "filter_entity_id": "light.kitchen",
            "end_time": "2024-06-01T20:00:00+00:00",
        }

    async def test_flags_only_sent_when_set(self, mock_session: MagicMock) -> None:
        client = make_client(mock_session)
        mock_session.get.return_value = create_mock_response(status=200, json_data=[])

        await client.fetch_history(
            "light.kitchen",
            minimal_response=True,
            no_attributes=True,
            significant_changes_only=True,
        )

        call_args = mock_session.get.call_args
        assert call_args.args[0] == "https://hass.local:8123/api/history/period"
        assert call_args.kwargs["params"] == {
            "filter_entity_id": "light.kitchen",
            "minimal_response": "true",
            "no_attributes": "true",
            "significant_changes_only": "true",
        }

    async def test_non_list_body_rejected(self, mock_session: MagicMock) -> None:
        client = make_client(mock_session)
        mock_session.get.return_value = create_mock_response(
            status=200, json_data={"unexpected": True}
        )

        with pytest.raises(HassResponseError, match="not a list"):
            await client.fetch_history("light.kitchen")


class TestHistoryAccessor:
    """Test history reads layered on fetch_history."""

    async def test_history_between(self) -> None:
        http = MagicMock()
        http.fetch_history = AsyncMock(return_value=HISTORY)

        states = await HistoryAccessor(http).history_between("light.kitchen", START, END)

        http.fetch_history.assert_awaited_once_with(
            "light.kitchen", start_time=START, end_time=END
        )
        assert [state.state for state in states] == ["off", "on"]
        assert states[1].entity_id == "light.kitchen"
        assert states[1].attributes == {}
        assert states[0].friendly_name == "Kitchen"

    async def test_history_between_empty(self) -> None:
        http = MagicMock()
        http.fetch_history = AsyncMock(return_value=[])

        assert await HistoryAccessor(http).history_between("light.kitchen") == []

    async def test_state_at(self) -> None:
        http = MagicMock()
        http.fetch_history = AsyncMock(return_value=[[{"state": "on"}]])

        assert await HistoryAccessor(http).state_at("light.kitchen", START) == "on"

        http.fetch_history.assert_awaited_once_with(
            "light.kitchen",
            start_time=START,
            end_time=START,
            minimal_response=True,
            no_attributes=True,
        )

    @pytest.mark.parametrize("response", [[], [[]], [[{"last_changed": "x"}]]])
    async def test_state_at_without_record(self, response) -> None:
        http = MagicMock()
        http.fetch_history = AsyncMock(return_value=response)

        assert await HistoryAccessor(http).state_at("light.kitchen", START) is None
