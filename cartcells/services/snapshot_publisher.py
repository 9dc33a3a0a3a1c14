# cartcells/services/snapshot_publisher.py
import redis
from redis.exceptions import RedisError

from cartcells.domain.schemas import StateOut, ReconciliationState
from cartcells.utils.retry import redis_retry
from cartcells.utils.settings import (
    REDIS_URL,
    SNAPSHOT_KEY,
    SNAPSHOT_CHANNEL,
    SNAPSHOT_TTL_SECONDS,
)
from cartcells.utils.logging import get_logger

logger = get_logger(__name__)


class SnapshotPublisher:
    """
    Subskrybent CartStore eksportujacy stan do redisa:
    -SET klucza ze snapshotem (TTL, nie trzeba czyscic recznie)
    -PUBLISH na kanal dla innych procesow
    Stany w trakcie ladowania sa pomijane. Stan z bledem nie nadpisuje widokow:
    do redisa idzie ostatni wyeksportowany snapshot z nowym bledem.
    """

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        channel: str | None = None,
        ttl: int | None = None,
        client: redis.Redis | None = None,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.key = key or SNAPSHOT_KEY
        self.channel = channel or SNAPSHOT_CHANNEL
        self.ttl = ttl or SNAPSHOT_TTL_SECONDS

    def __call__(self, state: ReconciliationState) -> None:
        if state.loading:
            return

        try:
            self.publish(state)
        except RedisError as e:
            #eksport jest best-effort, przebieg rekoncyliacji idzie dalej
            logger.warning(f"Nie udalo sie opublikowac snapshotu koszykow: {e}")

    @redis_retry()
    def publish(self, state: ReconciliationState) -> int:
        out = StateOut.from_state(state)

        if state.error:
            previous = self.read()
            if previous is not None:
                out = previous.model_copy(update={"error": state.error, "loading": False})

        payload = out.model_dump_json()
        logger.info(f"Publikacja snapshotu {self.key}: {len(out.views)} koszykow, blad: {out.error}")

        self.redis.set(name=self.key, value=payload, ex=self.ttl)
        return self.redis.publish(self.channel, payload)

    def read(self) -> StateOut | None:
        raw = self.redis.get(self.key)
        if raw is None:
            return None
        try:
            return StateOut.model_validate_json(raw)
        except ValueError as e:
            logger.warning(f"Uszkodzony snapshot {self.key}, pomijam: {e}")
            return None
