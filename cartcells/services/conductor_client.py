# cartcells/services/conductor_client.py
from typing import Any, List

import httpx
import msgpack
from msgpack.exceptions import UnpackException

from cartcells.domain.errors import TransportError
from cartcells.domain.identity import encode_hash
from cartcells.domain.schemas import CellReference
from cartcells.utils.retry import http_retry
from cartcells.utils.settings import (
    CONDUCTOR_URL,
    CONDUCTOR_TIMEOUT_SECONDS,
    CONDUCTOR_ROLE_NAME,
    CONDUCTOR_ZOME_NAME,
)
from cartcells.utils.logging import get_logger

logger = get_logger(__name__)

#funkcje zome wywolywane przez warstwe koszykow
FN_GET_CART_CLONES = "get_cart_clones"
FN_CLONE_CART_DNA = "clone_cart_dna"
FN_CREATE_CART_ENTRY = "create_cart_entry"
FN_GET_ALL_CARTS = "get_all_carts"

MSGPACK_CONTENT_TYPE = "application/msgpack"


class ConductorClient:
    """
    Zdalne wywolania procedur na komorkach.
    Body i odpowiedz w msgpack, zeby hashe zostaly binarne.
    cell_ref=None -> komorka bazowa (po role_name)
    """

    def __init__(
        self,
        base_url: str | None = None,
        role_name: str | None = None,
        zome_name: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or CONDUCTOR_URL).rstrip("/")
        self.role_name = role_name or CONDUCTOR_ROLE_NAME
        self.zome_name = zome_name or CONDUCTOR_ZOME_NAME
        self.timeout = timeout or CONDUCTOR_TIMEOUT_SECONDS
        self.http = http_client or httpx.AsyncClient(timeout=self.timeout)

    async def aclose(self) -> None:
        await self.http.aclose()

    @http_retry()
    async def _post(self, body: bytes) -> httpx.Response:
        url = f"{self.base_url}/api/call"
        return await self.http.post(
            url,
            content=body,
            headers={"Content-Type": MSGPACK_CONTENT_TYPE, "Accept": MSGPACK_CONTENT_TYPE},
        )

    async def invoke(self, cell_ref: CellReference | None, fn_name: str, payload: Any) -> Any:
        target = "base" if cell_ref is None else encode_hash(cell_ref.backing_id)
        logger.debug(f"Conductor call {fn_name} -> {target}")

        body = msgpack.packb(
            {
                "cell_id": list(cell_ref.cell_id) if cell_ref else None,
                "role_name": self.role_name,
                "zome_name": self.zome_name,
                "fn_name": fn_name,
                "payload": payload,
            },
            use_bin_type=True,
        )

        try:
            resp = await self._post(body)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError(f"Wywolanie {fn_name} na {target} nie powiodlo sie: {e}") from e

        try:
            return msgpack.unpackb(resp.content, raw=False)
        except (UnpackException, ValueError, TypeError) as e:
            raise TransportError(f"Niepoprawna odpowiedz {fn_name} z {target}: {e}") from e

    async def call_base(self, fn_name: str, payload: Any) -> Any:
        return await self.invoke(None, fn_name, payload)

    async def list_cart_clones(self) -> List[Any]:
        result = await self.call_base(FN_GET_CART_CLONES, None)
        if not isinstance(result, list):
            return []
        return result
