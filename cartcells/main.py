# cartcells/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from cartcells.api.routers import carts, health
from cartcells.services.cart_store import CartStore
from cartcells.services.conductor_client import ConductorClient
from cartcells.services.snapshot_publisher import SnapshotPublisher
from cartcells.utils.settings import (
    AGENT_PUB_KEY,
    CART_ROLE,
    FETCH_CONCURRENCY,
    PUBLISH_SNAPSHOTS,
)
from cartcells.utils.logging import get_logger

logger = get_logger(__name__)


def build_store(client: ConductorClient | None = None) -> CartStore:
    store = CartStore(
        client=client or ConductorClient(),
        self_identity=AGENT_PUB_KEY,
        role=CART_ROLE,
        concurrency=FETCH_CONCURRENCY,
    )
    if PUBLISH_SNAPSHOTS:
        store.subscribe(SnapshotPublisher(), replay=False)
    return store


def create_app(store: CartStore | None = None) -> FastAPI:
    cart_store = store or build_store()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Start serwisu koszykow, rola {cart_store.role}")
        await cart_store.refresh()
        yield
        await cart_store.client.aclose()

    app = FastAPI(
        title="Cart Cells",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.cart_store = cart_store

    # Include routers
    app.include_router(health.router)
    app.include_router(carts.router)

    return app


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
