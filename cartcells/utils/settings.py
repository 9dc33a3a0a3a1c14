# cartcells/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

CONDUCTOR_URL = os.getenv("CONDUCTOR_URL", "http://conductor:8888")
CONDUCTOR_TIMEOUT_SECONDS = float(os.getenv("CONDUCTOR_TIMEOUT_SECONDS", 10))
CONDUCTOR_ROLE_NAME = os.getenv("CONDUCTOR_ROLE_NAME", "syn")
CONDUCTOR_ZOME_NAME = os.getenv("CONDUCTOR_ZOME_NAME", "syn")

# klucz agenta w formie base64 (u...), porownywany z cart.owner
AGENT_PUB_KEY = os.getenv("AGENT_PUB_KEY", "")
CART_ROLE = os.getenv("CART_ROLE", "customer")
FETCH_CONCURRENCY = int(os.getenv("FETCH_CONCURRENCY", 1))

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
SNAPSHOT_KEY = os.getenv("SNAPSHOT_KEY", "carts:snapshot")
SNAPSHOT_CHANNEL = os.getenv("SNAPSHOT_CHANNEL", "carts:updates")
SNAPSHOT_TTL_SECONDS = int(os.getenv("SNAPSHOT_TTL_SECONDS", 5*60))
PUBLISH_SNAPSHOTS = os.getenv("PUBLISH_SNAPSHOTS", "false").lower() in ("1", "true", "yes")

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")
REFRESH_INTERVAL_SECONDS = float(os.getenv("REFRESH_INTERVAL_SECONDS", 60))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
