# cartcells/services/cart_store.py
from typing import Callable

from cartcells.domain.errors import RegistryUnavailable, TransportError
from cartcells.domain.schemas import Cart, CellReference, ReconciliationState
from cartcells.services.cart_fetcher import CartFetcher
from cartcells.services.cart_lifecycle import CartLifecycle
from cartcells.services.cell_registry import CellRegistry
from cartcells.services.conductor_client import ConductorClient
from cartcells.services.reconciliation import ReconciliationLoop, Subscriber
from cartcells.utils.logging import get_logger

logger = get_logger(__name__)


class CartStore:
    """
    Publiczny interfejs warstwy koszykow.
    commands (create_cart, refresh, set_role) uruchamiaja przebieg rekoncyliacji
    query (get_cart_data, get_cart_cell, state) czytaja opublikowany snapshot
    """

    def __init__(
        self,
        client: ConductorClient,
        self_identity: str,
        role: str = "customer",
        concurrency: int = 1,
    ):
        self.client = client
        self.self_identity = self_identity
        self.role = role

        self.registry = CellRegistry()
        self.fetcher = CartFetcher(client)
        self.loop = ReconciliationLoop(self.fetcher, concurrency=concurrency)
        self.lifecycle = CartLifecycle(
            client=client,
            registry=self.registry,
            loop=self.loop,
            reconcile=self.load_carts,
        )

    #query
    @property
    def state(self) -> ReconciliationState:
        return self.loop.state

    def subscribe(self, callback: Subscriber, replay: bool = True) -> Callable[[], None]:
        return self.loop.subscribe(callback, replay=replay)

    def get_cart_data(self, group_id: str) -> Cart | None:
        return self.loop.state.by_id.get(group_id)

    def get_cart_cell(self, group_id: str) -> CellReference | None:
        return self.loop.state.cells.get(group_id)

    #commands
    async def load_carts(self) -> ReconciliationState:
        return await self.loop.run(self.registry.list(), self.role, self.self_identity)

    async def refresh(self) -> ReconciliationState:
        """
        Enumeracja klonow -> podmiana rejestru -> przebieg.
        Jesli enumeracja padnie, zostaje ostatni dobry stan + error.
        """
        self.loop.mark_loading()

        try:
            clone_infos = await self.client.list_cart_clones()
            self.registry.replace_from_clones(clone_infos)
        except (TransportError, RegistryUnavailable) as e:
            logger.error(f"Nie udalo sie odswiezyc rejestru komorek: {e}")
            self.loop.fail(str(e))
            return self.loop.state

        return await self.load_carts()

    async def set_role(self, role: str) -> ReconciliationState:
        logger.info(f"Zmiana roli {self.role} -> {role}")
        self.role = role
        return await self.refresh()

    async def create_cart(self, document_ref: bytes, name: str) -> Cart:
        return await self.lifecycle.create_cart(document_ref, name)
