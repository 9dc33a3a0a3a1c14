"""Pytest configuration and fixtures"""
import os
import hashlib
from typing import Any, Dict, List

import pytest

# Set test environment variables
os.environ.setdefault("CONDUCTOR_URL", "http://conductor.test")
os.environ.setdefault("AGENT_PUB_KEY", "")
os.environ.setdefault("PUBLISH_SNAPSHOTS", "false")

from cartcells.domain.errors import TransportError
from cartcells.domain.identity import encode_hash
from cartcells.domain.schemas import Cart, CartStatus, CellReference
from cartcells.services.conductor_client import (
    FN_CLONE_CART_DNA,
    FN_CREATE_CART_ENTRY,
    FN_GET_ALL_CARTS,
)
from cartcells.services.entry_codec import make_record


def h(label: str) -> bytes:
    """Deterministyczny 32-bajtowy hash do testow."""
    return hashlib.sha256(label.encode()).digest()


ALICE = h("alice")
BOB = h("bob")
ALICE_ID = encode_hash(ALICE)
BOB_ID = encode_hash(BOB)


def make_cart(backing: str, created_at: int, owner: bytes = ALICE, **extra) -> Cart:
    return Cart(
        original_backing_id=h("base"),
        cart_backing_id=h(backing),
        document_ref=h("doc"),
        owner=owner,
        status=extra.pop("status", CartStatus.ACTIVE),
        created_at=created_at,
        **extra,
    )


def make_cell(label: str, agent: bytes = ALICE) -> CellReference:
    return CellReference(cell_id=(h(label), agent))


class FakeConductor:
    """
    Conductor w pamieci dla testow serwisow.
    records: backing id komorki -> lista rekordow (albo wyjatek do rzucenia)
    """

    def __init__(self):
        self.records: Dict[bytes, Any] = {}
        self.clones: Any = []
        self.clone_result: Any = None
        self.entry_result: Any = None
        self.calls: List[tuple] = []

    def put(self, cell: CellReference, *carts: Cart) -> None:
        self.records[cell.backing_id] = [make_record(c) for c in carts]

    def fail(self, cell: CellReference, message: str = "connection refused") -> None:
        self.records[cell.backing_id] = TransportError(message)

    async def invoke(self, cell_ref, fn_name, payload):
        self.calls.append((cell_ref, fn_name, payload))

        if fn_name == FN_GET_ALL_CARTS:
            result = self.records.get(cell_ref.backing_id, [])
        elif fn_name == FN_CREATE_CART_ENTRY:
            result = self.entry_result
        else:
            raise AssertionError(f"nieoczekiwane wywolanie {fn_name}")

        if isinstance(result, Exception):
            raise result
        return result

    async def call_base(self, fn_name, payload):
        self.calls.append((None, fn_name, payload))
        if fn_name != FN_CLONE_CART_DNA:
            raise AssertionError(f"nieoczekiwane wywolanie {fn_name}")
        if isinstance(self.clone_result, Exception):
            raise self.clone_result
        return self.clone_result

    async def list_cart_clones(self):
        if isinstance(self.clones, Exception):
            raise self.clones
        return self.clones

    async def aclose(self):
        pass


@pytest.fixture
def conductor():
    return FakeConductor()
