# cartcells/conductor_mock/main.py
import hashlib
import itertools
import time
from typing import Any, Callable, Dict, List

import msgpack
from fastapi import FastAPI, HTTPException, Request, Response

from cartcells.domain.schemas import Cart, CartStatus
from cartcells.services.conductor_client import (
    FN_CLONE_CART_DNA,
    FN_CREATE_CART_ENTRY,
    FN_GET_ALL_CARTS,
    FN_GET_CART_CLONES,
    MSGPACK_CONTENT_TYPE,
)
from cartcells.services.entry_codec import make_record

BASE_DNA_HASH = hashlib.sha256(b"syn-base-dna").digest()
DEV_AGENT_KEY = hashlib.sha256(b"dev-agent").digest()


class MockConductor:
    """Komorki w pamieci: klon = nowy hash DNA, w kazdym klonie lista rekordow."""

    def __init__(self, agent_key: bytes = DEV_AGENT_KEY):
        self.agent_key = agent_key
        self.clones: List[Dict[str, Any]] = []
        self.records: Dict[bytes, List[dict]] = {}
        self._counter = itertools.count(1)

    def _new_dna_hash(self) -> bytes:
        return hashlib.sha256(b"cart-clone-%d" % next(self._counter)).digest()

    def get_cart_clones(self, cell_id: Any, payload: Any) -> List[dict]:
        return list(self.clones)

    def clone_cart_dna(self, cell_id: Any, payload: Any) -> dict:
        dna_hash = self._new_dna_hash()
        created_at = time.time_ns() // 1000

        self.clones.append(
            {
                "dna_hash": BASE_DNA_HASH,
                "cart_dna_hash": dna_hash,
                "agent_key": self.agent_key,
                "created_at": created_at,
            }
        )
        self.records[dna_hash] = []
        return {"cell_id": [dna_hash, self.agent_key], "created_at": created_at}

    def create_cart_entry(self, cell_id: Any, payload: Any) -> dict:
        if not cell_id or cell_id[0] not in self.records:
            raise HTTPException(status_code=404, detail="Komorka nie istnieje")

        cart = Cart(
            original_backing_id=BASE_DNA_HASH,
            cart_backing_id=cell_id[0],
            document_ref=payload["input"]["document_hash"],
            owner=cell_id[1],
            status=CartStatus.ACTIVE,
            created_at=payload["created_at"],
            meta={"name": payload["input"]["cart_name"]},
        )
        record = make_record(cart)
        self.records[cell_id[0]].append(record)
        return record

    def get_all_carts(self, cell_id: Any, payload: Any) -> List[dict]:
        if not cell_id or cell_id[0] not in self.records:
            raise HTTPException(status_code=404, detail="Komorka nie istnieje")
        return list(self.records[cell_id[0]])

    def handlers(self) -> Dict[str, Callable[[Any, Any], Any]]:
        return {
            FN_GET_CART_CLONES: self.get_cart_clones,
            FN_CLONE_CART_DNA: self.clone_cart_dna,
            FN_CREATE_CART_ENTRY: self.create_cart_entry,
            FN_GET_ALL_CARTS: self.get_all_carts,
        }


def create_app(conductor: MockConductor | None = None) -> FastAPI:
    app = FastAPI(title="Conductor (dev mock)")
    app.state.conductor = conductor or MockConductor()

    @app.post("/api/call")
    async def call(request: Request):
        try:
            body = msgpack.unpackb(await request.body(), raw=False)
        except ValueError:
            raise HTTPException(status_code=400, detail="Body nie jest msgpack")
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Body musi byc mapa")

        handler = app.state.conductor.handlers().get(body.get("fn_name"))
        if handler is None:
            raise HTTPException(status_code=404, detail=f"Nieznana funkcja {body.get('fn_name')}")

        result = handler(body.get("cell_id"), body.get("payload"))
        return Response(
            content=msgpack.packb(result, use_bin_type=True),
            media_type=MSGPACK_CONTENT_TYPE,
        )

    return app


app = create_app()
