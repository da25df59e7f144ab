# tests/test_batching.py
import asyncio
from collections import Counter

import httpx
import pytest

from wms_grading.schemas.common import GeoCoordinate
from wms_grading.services import batching
from wms_grading.services.resilience import FetchOutcome, FetchStatus

from conftest import ENDPOINT, LAYER, coordinate_of, feature_response


def line_of_points(n):
    return [GeoCoordinate(lat=52.0 + i * 0.01, lon=4.0) for i in range(n)]


@pytest.mark.asyncio
async def test_twelve_points_go_out_in_three_batches(client_for, policy, pauses):
    batch_of_call = []

    def handler(request):
        # number of inter-batch pauses so far == index of the running batch
        batch_of_call.append(len(pauses))
        return feature_response({"value": 1})

    async with client_for(handler) as client:
        outcomes = await batching.fetch_in_batches(client, ENDPOINT, LAYER, line_of_points(12), policy)

    assert len(batch_of_call) == 12
    assert Counter(batch_of_call) == {0: 5, 1: 5, 2: 2}
    # pause between batches only, none after the last one
    assert pauses == [200, 200]
    assert all(o.ok for o in outcomes)


@pytest.mark.asyncio
async def test_single_batch_has_no_pause(client_for, policy, pauses):
    async with client_for(lambda r: feature_response({"value": 1})) as client:
        outcomes = await batching.fetch_in_batches(client, ENDPOINT, LAYER, line_of_points(5), policy)
    assert len(outcomes) == 5
    assert pauses == []


@pytest.mark.asyncio
async def test_empty_point_list(client_for, policy, pauses):
    async with client_for(lambda r: feature_response({"value": 1})) as client:
        assert await batching.fetch_in_batches(client, ENDPOINT, LAYER, [], policy) == []
    assert pauses == []


@pytest.mark.asyncio
async def test_results_keep_submission_order_and_failures(client_for, policy):
    points = line_of_points(7)

    def handler(request):
        lat = coordinate_of(request).lat
        index = round((lat - 52.0) / 0.01)
        if index == 2:
            return httpx.Response(500)
        if index == 4:
            raise httpx.ConnectError("refused", request=request)
        return feature_response({"value": index})

    async with client_for(handler) as client:
        outcomes = await batching.fetch_in_batches(client, ENDPOINT, LAYER, points, policy)

    assert [o.status for o in outcomes] == [
        FetchStatus.OK, FetchStatus.OK, FetchStatus.NO_DATA, FetchStatus.OK,
        FetchStatus.UNREACHABLE, FetchStatus.OK, FetchStatus.OK,
    ]
    assert [o.attributes["value"] for o in outcomes if o.ok] == [0, 1, 3, 5, 6]


@pytest.mark.asyncio
async def test_completion_order_does_not_reorder_results(monkeypatch, client_for, policy):
    points = line_of_points(5)

    async def slow_first(client, endpoint, layer_id, coordinate, policy):
        # earlier points finish later
        await asyncio.sleep((points[-1].lat - coordinate.lat) / 10)
        return FetchOutcome(FetchStatus.OK, attributes={"lat": coordinate.lat})

    monkeypatch.setattr(batching, "fetch_with_retry", slow_first)
    async with client_for(lambda r: feature_response()) as client:
        located = await batching.fetch_in_batches_with_location(client, ENDPOINT, LAYER, points, policy)

    assert [item.coordinate for item in located] == points
    assert [item.outcome.attributes["lat"] for item in located] == [p.lat for p in points]


@pytest.mark.asyncio
async def test_unexpected_exception_is_settled_not_raised(monkeypatch, client_for, policy):
    async def boom(client, endpoint, layer_id, coordinate, policy):
        if coordinate.lat > 52.015:
            raise RuntimeError("bug")
        return FetchOutcome(FetchStatus.OK, attributes={"value": 1})

    monkeypatch.setattr(batching, "fetch_with_retry", boom)
    async with client_for(lambda r: feature_response()) as client:
        outcomes = await batching.fetch_in_batches(client, ENDPOINT, LAYER, line_of_points(3), policy)

    assert [o.status for o in outcomes] == [FetchStatus.OK, FetchStatus.OK, FetchStatus.FAILED]
    assert "RuntimeError" in outcomes[2].reason
