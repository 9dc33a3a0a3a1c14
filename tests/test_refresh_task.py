"""
Tests for the periodic refresh task
"""

import json
from unittest.mock import Mock, patch

import pytest

from cartcells.domain.errors import TransportError
from cartcells.services.cart_store import CartStore
from cartcells.services.entry_codec import make_record
from cartcells.services.snapshot_publisher import SnapshotPublisher
from cartcells.tasks import refresh
from conftest import ALICE, FakeConductor, h, make_cart


@pytest.mark.asyncio
async def test_refresh_once_exports_snapshot():
    conductor = FakeConductor()
    conductor.clones = [{"cart_dna_hash": h("a"), "agent_key": ALICE, "created_at": 1}]
    conductor.records[h("a")] = [make_record(make_cart("a", 1))]
    publisher = Mock()

    with patch.object(refresh, "CART_ROLE", "scanner"):
        summary = await refresh.refresh_once(conductor, publisher)

    assert summary == {"carts": 1, "cells": 1, "error": None}
    published = [call.args[0] for call in publisher.call_args_list]
    assert published[-1].loading is False
    assert len(published[-1].views) == 1


def test_task_reports_error():
    conductor = FakeConductor()
    conductor.clones = TransportError("down")

    with patch.object(refresh, "ConductorClient", return_value=conductor), \
            patch.object(refresh, "SnapshotPublisher", return_value=Mock()):
        summary = refresh.refresh_carts_task()

    assert summary["error"]
    assert summary["carts"] == 0


class FakeRedis:
    """Klucze w slowniku, publish zapisuje wiadomosci."""

    def __init__(self):
        self.data = {}
        self.writes = []
        self.messages = []

    def set(self, name, value, ex=None):
        self.data[name] = value
        self.writes.append(json.loads(value))

    def get(self, name):
        return self.data.get(name)

    def publish(self, channel, message):
        self.messages.append((channel, message))
        return 1


@pytest.mark.asyncio
async def test_failed_tick_keeps_last_exported_views():
    redis_client = FakeRedis()
    publisher = SnapshotPublisher(key="carts:test", channel="carts:chan", ttl=30, client=redis_client)

    conductor = FakeConductor()
    conductor.clones = [{"cart_dna_hash": h("a"), "agent_key": ALICE, "created_at": 1}]
    conductor.records[h("a")] = [make_record(make_cart("a", 1))]

    with patch.object(refresh, "CART_ROLE", "scanner"):
        await refresh.refresh_once(conductor, publisher)
        conductor.clones = TransportError("conductor down")
        summary = await refresh.refresh_once(conductor, publisher)

    assert summary["error"] == "conductor down"
    #zaden zapis nie wyczyscil koszykow
    assert [len(w["views"]) for w in redis_client.writes] == [1, 1]
    assert redis_client.writes[-1]["error"] == "conductor down"
    assert publisher.read().views[0].cart.created_at == 1


@pytest.mark.asyncio
async def test_subscribing_publisher_exports_nothing_before_first_commit():
    redis_client = FakeRedis()
    publisher = SnapshotPublisher(key="carts:test", channel="carts:chan", ttl=30, client=redis_client)
    conductor = FakeConductor()

    store = CartStore(conductor, self_identity="")
    store.subscribe(publisher, replay=False)

    assert redis_client.writes == []
