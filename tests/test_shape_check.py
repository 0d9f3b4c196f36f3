"""Tests for the REST shape check against a recorded archive."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from har_mocks.clients.rest import RestClient
from har_mocks.exceptions import ArchiveEntryError, LiveEndpointError
from har_mocks.schemas.har import HarArchive
from har_mocks.services.shape_check import ShapeCheckService, compare_shapes
from tests.conftest import DEEPLY_NESTED_JSON, make_archive, make_raw_entry

FORECAST_URL = 'https://api.open-meteo.com/v1/forecast?latitude=51.5074&longitude=-0.1278'
RECORDED = {'current': {'time': 1767436380, 'temperature_2m': 7.4}, 'current_units': {'time': 'unixtime'}}

Handler = Callable[[httpx.Request], httpx.Response]


def _rest_client(handler: Handler) -> RestClient:
    return RestClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def _forecast_archive() -> HarArchive:
    return make_archive(make_raw_entry(url=FORECAST_URL, method='GET', response_text=json.dumps(RECORDED)))


def test_compare_shapes_ignores_values() -> None:
    live = {'current': {'time': 1767500000, 'temperature_2m': -2.0}, 'current_units': {'time': 'unixtime'}}
    result = compare_shapes(RECORDED, live)

    assert not result.changed
    assert list(result.added) == []
    assert list(result.removed) == []


def test_compare_shapes_lists_added_and_removed_paths() -> None:
    live = {'current': {'time': 1, 'wind_speed_10m': 3.1}, 'current_units': {'time': 'unixtime'}}
    result = compare_shapes(RECORDED, live)

    assert result.changed
    assert list(result.added) == ['current.wind_speed_10m']
    assert list(result.removed) == ['current.temperature_2m']


@pytest.mark.asyncio
async def test_check_fetches_live_url_and_diffs() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={'current': {'time': 2}, 'current_units': {'time': 'unixtime'}})

    async with _rest_client(handler) as client:
        service = ShapeCheckService()
        result = await service.check(_forecast_archive(), 'api.open-meteo.com/v1/forecast', FORECAST_URL, client)

    assert seen == [FORECAST_URL]
    assert list(result.removed) == ['current.temperature_2m']


@pytest.mark.asyncio
async def test_check_requires_archived_exchange() -> None:
    async with _rest_client(lambda request: httpx.Response(200, json={})) as client:
        with pytest.raises(ArchiveEntryError):
            await ShapeCheckService().check(_forecast_archive(), 'api.example.com', FORECAST_URL, client)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    'response',
    [
        httpx.Response(502, text='bad gateway'),
        httpx.Response(200, content=b'<html></html>'),
        httpx.Response(200, content=DEEPLY_NESTED_JSON.encode()),
    ],
    ids=['http-502', 'html-body', 'deep-body'],
)
async def test_unusable_live_response_raises_endpoint_error(response: httpx.Response) -> None:
    async with _rest_client(lambda request: response) as client:
        with pytest.raises(LiveEndpointError):
            await client.get_json(FORECAST_URL)
