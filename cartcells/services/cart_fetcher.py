# cartcells/services/cart_fetcher.py
from dataclasses import dataclass, field
from typing import List

from cartcells.domain.errors import TransportError
from cartcells.domain.identity import encode_hash
from cartcells.domain.schemas import Cart, CellReference
from cartcells.services.conductor_client import ConductorClient, FN_GET_ALL_CARTS
from cartcells.services.entry_codec import DecodeFailed, decode_record
from cartcells.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class FetchResult:
    carts: List[Cart] = field(default_factory=list)
    skipped: int = 0
    error: TransportError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CartFetcher:
    """
    Pobiera koszyki z jednej komorki.
    - jedno wywolanie get_all_carts na komorke
    - kazdy rekord dekodowany osobno, zly rekord pomijany
    - blad transportu -> pusty wynik + error, bez wyjatku
    """

    def __init__(self, client: ConductorClient, fn_name: str = FN_GET_ALL_CARTS):
        self.client = client
        self.fn_name = fn_name

    async def fetch(self, cell_ref: CellReference) -> FetchResult:
        cell_name = encode_hash(cell_ref.backing_id)

        try:
            records = await self.client.invoke(cell_ref, self.fn_name, None)
        except TransportError as e:
            logger.warning(f"Komorka {cell_name} niedostepna: {e}")
            return FetchResult(error=e)

        if records is None:
            return FetchResult()

        if not isinstance(records, list):
            error = TransportError(
                f"Komorka {cell_name} zwrocila {type(records).__name__} zamiast listy"
            )
            logger.warning(str(error))
            return FetchResult(error=error)

        result = FetchResult()
        for record in records:
            decoded = decode_record(record)
            if isinstance(decoded, DecodeFailed):
                result.skipped += 1
                logger.warning(f"Pomijam rekord z komorki {cell_name}: {decoded.error}")
                continue
            result.carts.append(decoded.cart)

        logger.debug(
            f"Komorka {cell_name}: {len(result.carts)} koszykow, pominieto {result.skipped}"
        )
        return result
