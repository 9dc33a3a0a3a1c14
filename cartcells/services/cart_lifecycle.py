# cartcells/services/cart_lifecycle.py
from typing import Awaitable, Callable

from pydantic import ValidationError

from cartcells.domain.errors import DecodeError, LifecycleError, TransportError
from cartcells.domain.identity import encode_hash
from cartcells.domain.schemas import Cart, CloneResult
from cartcells.services.cell_registry import CellRegistry
from cartcells.services.conductor_client import (
    ConductorClient,
    FN_CLONE_CART_DNA,
    FN_CREATE_CART_ENTRY,
)
from cartcells.services.entry_codec import decode_record
from cartcells.services.reconciliation import ReconciliationLoop
from cartcells.utils.logging import get_logger

logger = get_logger(__name__)


class CartLifecycle:
    """
    Tworzenie koszyka - wszystko albo nic:
    1. clone_cart_dna na komorce bazowej -> nowa komorka
    2. create_cart_entry w nowej komorce
    3. dekodowanie wpisu
    4. rejestracja komorki + przebieg rekoncyliacji
    Blad w 1-3 -> komorka nie trafia do rejestru, error w stanie, LifecycleError dalej.
    """

    def __init__(
        self,
        client: ConductorClient,
        registry: CellRegistry,
        loop: ReconciliationLoop,
        reconcile: Callable[[], Awaitable[object]],
    ):
        self.client = client
        self.registry = registry
        self.loop = loop
        self.reconcile = reconcile

    async def create_cart(self, document_ref: bytes, name: str) -> Cart:
        self.loop.mark_loading()

        cart_input = {
            "document_hash": document_ref,
            "cart_name": name,
        }

        try:
            raw_clone = await self.client.call_base(FN_CLONE_CART_DNA, cart_input)
            clone = CloneResult.model_validate(raw_clone)
            cell_ref = clone.to_cell_reference()

            logger.info(
                f"Nowa komorka koszyka {encode_hash(cell_ref.backing_id)} "
                f"dla agenta {encode_hash(cell_ref.agent)}"
            )

            record = await self.client.invoke(
                cell_ref,
                FN_CREATE_CART_ENTRY,
                {"input": cart_input, "created_at": clone.created_at},
            )
            cart = decode_record(record).unwrap()

        except (TransportError, DecodeError, ValidationError) as e:
            logger.error(f"Blad podczas tworzenia koszyka '{name}': {e}")
            self.loop.fail(str(e))
            raise LifecycleError(f"Nie udalo sie utworzyc koszyka '{name}': {e}") from e

        group_id = self.registry.register(cell_ref, (cell_ref.backing_id, clone.created_at))
        logger.info(f"Utworzono koszyk {group_id}")

        await self.reconcile()
        return cart
