# cartcells/tasks/refresh.py
import asyncio

from cartcells.celery_worker import celery_app
from cartcells.services.cart_store import CartStore
from cartcells.services.conductor_client import ConductorClient
from cartcells.services.snapshot_publisher import SnapshotPublisher
from cartcells.utils.settings import AGENT_PUB_KEY, CART_ROLE, FETCH_CONCURRENCY
from cartcells.utils.logging import get_logger

logger = get_logger(__name__)


async def refresh_once(client: ConductorClient, publisher: SnapshotPublisher) -> dict:
    store = CartStore(
        client=client,
        self_identity=AGENT_PUB_KEY,
        role=CART_ROLE,
        concurrency=FETCH_CONCURRENCY,
    )
    store.subscribe(publisher, replay=False)

    try:
        state = await store.refresh()
    finally:
        await client.aclose()

    return {
        "carts": len(state.views),
        "cells": len(store.registry),
        "error": state.error,
    }


@celery_app.task(name="cartcells.tasks.refresh.refresh_carts_task")
def refresh_carts_task():
    logger.info("Refresh carts task started")

    summary = asyncio.run(refresh_once(ConductorClient(), SnapshotPublisher()))

    if summary["error"]:
        logger.warning(f"Odswiezenie koszykow z bledem: {summary['error']}")
    else:
        logger.info(f"Odswiezono {summary['carts']} koszykow z {summary['cells']} komorek")

    return summary
