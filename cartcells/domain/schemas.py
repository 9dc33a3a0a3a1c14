# cartcells/domain/schemas.py
from enum import Enum
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cartcells.domain.identity import encode_hash, group_id_for


class CartStatus(str, Enum):
    ACTIVE = "Active"
    CHECKED_OUT = "CheckedOut"
    PROCESSED = "Processed"


class FrozenModel(BaseModel):
    """Wspolna konfiguracja: niemutowalne modele, bytes w JSON jako base64."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )


class Cart(FrozenModel):
    """
    Koszyk zapisany w swojej komorce.
    Aliasy odpowiadaja nazwom pol we wpisie zapisanym przez conductor.
    """

    original_backing_id: bytes = Field(..., alias="original_dna_hash")
    cart_backing_id: bytes = Field(..., alias="cart_dna_hash")
    document_ref: bytes = Field(..., alias="document_hash")
    owner: str
    status: CartStatus
    created_at: int
    meta: Any | None = None

    @field_validator("owner", mode="before")
    @classmethod
    def _encode_owner(cls, value: Any) -> Any:
        #klucz agenta przychodzi binarnie, porownujemy go jako string
        if isinstance(value, (bytes, bytearray)):
            return encode_hash(bytes(value))
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _unwrap_status(cls, value: Any) -> Any:
        #enum zapisany jako {"Active": null}
        if isinstance(value, dict) and len(value) == 1:
            return next(iter(value))
        return value

    @property
    def identity_key(self) -> Tuple[bytes, int]:
        return (self.cart_backing_id, self.created_at)

    @property
    def group_id(self) -> str:
        return group_id_for(self.cart_backing_id, self.created_at)


class CellReference(FrozenModel):
    cell_id: Tuple[bytes, bytes]
    network_seed: str = ""

    @property
    def backing_id(self) -> bytes:
        return self.cell_id[0]

    @property
    def agent(self) -> bytes:
        return self.cell_id[1]


class CloneInfo(FrozenModel):
    """Jeden wpis z enumeracji klonow (get_cart_clones)."""

    cart_dna_hash: bytes
    agent_key: bytes
    created_at: int
    dna_hash: bytes | None = None

    def to_cell_reference(self) -> CellReference:
        return CellReference(cell_id=(self.cart_dna_hash, self.agent_key))

    @property
    def group_id(self) -> str:
        return group_id_for(self.cart_dna_hash, self.created_at)


class CloneResult(FrozenModel):
    """Odpowiedz clone_cart_dna - nowa komorka."""

    cell_id: Tuple[bytes, bytes]
    created_at: int

    def to_cell_reference(self) -> CellReference:
        return CellReference(cell_id=self.cell_id)


class CartView(FrozenModel):
    group_id: str
    cart: Cart
    cell: CellReference

    @classmethod
    def build(cls, cart: Cart, cell: CellReference) -> "CartView":
        return cls(group_id=cart.group_id, cart=cart, cell=cell)


class ReconciliationState(FrozenModel):
    """Jedyny wspoldzielony stan. Podmieniany w calosci przy kazdym przebiegu."""

    views: List[CartView] = Field(default_factory=list)
    by_id: Dict[str, Cart] = Field(default_factory=dict)
    cells: Dict[str, CellReference] = Field(default_factory=dict)
    loading: bool = False
    error: str | None = None

    @classmethod
    def from_views(cls, views: List[CartView]) -> "ReconciliationState":
        #by_id i cells budowane tylko z zaakceptowanych widokow
        return cls(
            views=list(views),
            by_id={v.group_id: v.cart for v in views},
            cells={v.group_id: v.cell for v in views},
            loading=False,
            error=None,
        )


# =====================================================
# HTTP (in/out)
# =====================================================

class CreateCartIn(BaseModel):
    """Schema dla tworzenia koszyka."""

    document_ref: str = Field(..., min_length=2, description="Hash dokumentu (base64, prefiks u)")
    name: str = Field(..., min_length=1, max_length=100, description="Nazwa koszyka")


class RoleIn(BaseModel):
    role: str = Field(..., min_length=1, max_length=50)


class CellOut(BaseModel):
    backing_id: str
    agent: str
    network_seed: str

    @classmethod
    def from_cell(cls, cell: CellReference) -> "CellOut":
        return cls(
            backing_id=encode_hash(cell.backing_id),
            agent=encode_hash(cell.agent),
            network_seed=cell.network_seed,
        )


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    group_id: str
    original_backing_id: str
    cart_backing_id: str
    document_ref: str
    owner: str
    status: CartStatus
    created_at: int
    meta: Any | None = None

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartOut":
        return cls(
            group_id=cart.group_id,
            original_backing_id=encode_hash(cart.original_backing_id),
            cart_backing_id=encode_hash(cart.cart_backing_id),
            document_ref=encode_hash(cart.document_ref),
            owner=cart.owner,
            status=cart.status,
            created_at=cart.created_at,
            meta=cart.meta,
        )


class CartViewOut(BaseModel):
    group_id: str
    cart: CartOut
    cell: CellOut


class StateOut(BaseModel):
    views: List[CartViewOut]
    loading: bool
    error: str | None = None

    @classmethod
    def from_state(cls, state: ReconciliationState) -> "StateOut":
        return cls(
            views=[
                CartViewOut(
                    group_id=v.group_id,
                    cart=CartOut.from_cart(v.cart),
                    cell=CellOut.from_cell(v.cell),
                )
                for v in state.views
            ],
            loading=state.loading,
            error=state.error,
        )
