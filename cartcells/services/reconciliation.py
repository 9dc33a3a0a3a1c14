# cartcells/services/reconciliation.py
import asyncio
from typing import Callable, Iterable, List, Set, Tuple

from cartcells.domain.identity import encode_hash
from cartcells.domain.schemas import CartView, CellReference, ReconciliationState
from cartcells.services.cart_fetcher import CartFetcher, FetchResult
from cartcells.services.visibility import is_visible
from cartcells.utils.logging import get_logger

logger = get_logger(__name__)

Subscriber = Callable[[ReconciliationState], None]


class ReconciliationLoop:
    """
    Wlasciciel ReconciliationState.

    Przebieg: fetch z kazdej komorki (kolejnosc rejestru) -> dedup po
    (cart_backing_id, created_at), pierwszy wygrywa -> filtr widocznosci ->
    jeden commit calego stanu.

    Blad jednej komorki nie przerywa przebiegu. Przebieg starszy niz
    ostatnio rozpoczety nie commituje (licznik generacji).
    """

    def __init__(self, fetcher: CartFetcher, concurrency: int = 1):
        if concurrency < 1:
            raise ValueError("concurrency musi byc >= 1")

        self.fetcher = fetcher
        self.concurrency = concurrency
        self._state = ReconciliationState()
        self._subscribers: List[Subscriber] = []
        self._generation = 0

    @property
    def state(self) -> ReconciliationState:
        return self._state

    #publish/subscribe
    def subscribe(self, callback: Subscriber, replay: bool = True) -> Callable[[], None]:
        #replay=False - tylko przyszle commity, bez biezacego stanu
        self._subscribers.append(callback)
        if replay:
            self._notify_one(callback, self._state)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify_one(self, callback: Subscriber, state: ReconciliationState) -> None:
        try:
            callback(state)
        except Exception:
            logger.exception("Subskrybent stanu koszykow rzucil wyjatek")

    def _commit(self, state: ReconciliationState) -> None:
        #jedno przypisanie, subskrybenci dostaja gotowy snapshot
        self._state = state
        for callback in list(self._subscribers):
            self._notify_one(callback, state)

    def mark_loading(self) -> None:
        self._commit(self._state.model_copy(update={"loading": True, "error": None}))

    def fail(self, message: str) -> None:
        #widoki zostaja z ostatniego dobrego stanu
        self._commit(self._state.model_copy(update={"loading": False, "error": message}))

    async def _fetch_one(
        self,
        semaphore: asyncio.Semaphore,
        group_id: str,
        cell_ref: CellReference,
    ) -> FetchResult:
        async with semaphore:
            try:
                return await self.fetcher.fetch(cell_ref)
            except Exception as e:
                #fetcher nie powinien rzucac, ale jedna komorka nie moze zatrzymac przebiegu
                logger.warning(f"Nie udalo sie pobrac koszyka z komorki {group_id}: {e}")
                return FetchResult()

    async def _fetch_all(self, entries: List[Tuple[str, CellReference]]) -> List[FetchResult]:
        semaphore = asyncio.Semaphore(self.concurrency)
        #gather zwraca wyniki w kolejnosci wejscia = kolejnosc rejestru
        return await asyncio.gather(
            *(self._fetch_one(semaphore, group_id, cell_ref) for group_id, cell_ref in entries)
        )

    async def run(
        self,
        registry_snapshot: Iterable[Tuple[str, CellReference]],
        role: str,
        self_identity: str,
    ) -> ReconciliationState:
        self._generation += 1
        generation = self._generation

        self.mark_loading()

        try:
            entries = list(registry_snapshot)
        except Exception as e:
            logger.error(f"Rejestr komorek niedostepny: {e}")
            self.fail(str(e))
            return self._state

        logger.info(f"Przebieg {generation}: {len(entries)} komorek, rola {role}")

        results = await self._fetch_all(entries)

        views: List[CartView] = []
        seen: Set[Tuple[bytes, int]] = set()
        failed = 0

        for (group_id, cell_ref), result in zip(entries, results):
            if not result.ok:
                failed += 1

            for cart in result.carts:
                key = cart.identity_key
                if key in seen:
                    logger.debug(
                        f"Duplikat koszyka {encode_hash(key[0])}_{key[1]} w komorce {group_id}, pomijam"
                    )
                    continue
                seen.add(key)

                if not is_visible(cart, role, self_identity):
                    continue

                views.append(CartView.build(cart, cell_ref))

        #odrzucamy juz gdy nowszy przebieg wystartowal (nie dopiero gdy scommitowal);
        #loading zostaje true do commitu nowszego przebiegu
        if generation != self._generation:
            logger.info(
                f"Przebieg {generation} wyprzedzony przez {self._generation}, wynik odrzucony"
            )
            return self._state

        state = ReconciliationState.from_views(views)
        self._commit(state)

        logger.info(
            f"Przebieg {generation} zakonczony: {len(views)} koszykow, "
            f"{len(seen)} unikalnych, {failed} komorek z bledem"
        )
        return state
