# cartcells/services/cell_registry.py
from typing import Iterable, List, Tuple

from pydantic import ValidationError

from cartcells.domain.errors import RegistryUnavailable
from cartcells.domain.identity import group_id_for
from cartcells.domain.schemas import CellReference, CloneInfo
from cartcells.utils.logging import get_logger

logger = get_logger(__name__)


class CellRegistry:
    """
    Znane komorki koszykow, kluczowane po group_id.
    Kolejnosc wstawiania = kolejnosc iteracji (od niej zalezy dedup first-seen).
    Wpis znika tylko przez replace_all.
    """

    def __init__(self):
        self._cells: dict[str, CellReference] = {}

    def register(self, cell_ref: CellReference, identity_hint: Tuple[bytes, int]) -> str:
        backing_id, created_at = identity_hint
        group_id = group_id_for(backing_id, created_at)

        if group_id in self._cells:
            logger.info(f"Komorka {group_id} juz zarejestrowana, nadpisuje referencje")

        self._cells[group_id] = cell_ref
        return group_id

    def list(self) -> List[Tuple[str, CellReference]]:
        #kopia - przebieg iteruje po snapshocie, nie po zywym slowniku
        return list(self._cells.items())

    def replace_all(self, entries: Iterable[Tuple[str, CellReference]]) -> None:
        self._cells = dict(entries)
        logger.info(f"Rejestr komorek podmieniony, liczba komorek: {len(self._cells)}")

    def replace_from_clones(self, clone_infos: Iterable[dict]) -> None:
        """Przebudowa z wyniku enumeracji get_cart_clones."""
        try:
            infos = [CloneInfo.model_validate(raw) for raw in clone_infos]
        except (ValidationError, TypeError) as e:
            raise RegistryUnavailable(f"Niepoprawna odpowiedz enumeracji klonow: {e}") from e

        self.replace_all((info.group_id, info.to_cell_reference()) for info in infos)

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, group_id: str) -> bool:
        return group_id in self._cells
