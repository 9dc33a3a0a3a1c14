# cartcells/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Request

from cartcells.domain.errors import LifecycleError
from cartcells.domain.identity import decode_hash
from cartcells.domain.schemas import (
    CartOut,
    CellOut,
    CreateCartIn,
    RoleIn,
    StateOut,
)
from cartcells.services.cart_store import CartStore

router = APIRouter(prefix="/carts", tags=["carts"])


def get_store(request: Request) -> CartStore:
    return request.app.state.cart_store


@router.get("/", response_model=StateOut)
async def list_carts(store: CartStore = Depends(get_store)):
    return StateOut.from_state(store.state)


@router.post("/", response_model=CartOut)
async def create_cart(payload: CreateCartIn, store: CartStore = Depends(get_store)):
    try:
        document_ref = decode_hash(payload.document_ref)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        cart = await store.create_cart(document_ref, payload.name)
    except LifecycleError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return CartOut.from_cart(cart)


@router.post("/refresh", response_model=StateOut)
async def refresh_carts(store: CartStore = Depends(get_store)):
    return StateOut.from_state(await store.refresh())


@router.put("/role", response_model=StateOut)
async def change_role(payload: RoleIn, store: CartStore = Depends(get_store)):
    return StateOut.from_state(await store.set_role(payload.role))


@router.get("/{group_id}", response_model=CartOut)
async def get_cart(group_id: str, store: CartStore = Depends(get_store)):
    cart = store.get_cart_data(group_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Koszyk nie znaleziony")
    return CartOut.from_cart(cart)


@router.get("/{group_id}/cell", response_model=CellOut)
async def get_cart_cell(group_id: str, store: CartStore = Depends(get_store)):
    cell = store.get_cart_cell(group_id)
    if not cell:
        raise HTTPException(status_code=404, detail="Komorka koszyka nie znaleziona")
    return CellOut.from_cell(cell)
