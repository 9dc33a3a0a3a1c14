# cartcells/domain/identity.py
import base64

_PREFIX = "u"


def encode_hash(raw: bytes) -> str:
    """bytes -> "u" + base64url bez paddingu (format multibase po stronie conductora)."""
    return _PREFIX + base64.urlsafe_b64encode(bytes(raw)).decode("ascii").rstrip("=")


def decode_hash(encoded: str) -> bytes:
    if not encoded or not encoded.startswith(_PREFIX):
        raise ValueError(f"Niepoprawny identyfikator: {encoded!r}")

    body = encoded[len(_PREFIX):]
    #dopelnij padding do wielokrotnosci 4
    body += "=" * (-len(body) % 4)
    try:
        return base64.urlsafe_b64decode(body.encode("ascii"))
    except (ValueError, UnicodeEncodeError) as e:
        raise ValueError(f"Niepoprawny identyfikator: {encoded!r}") from e


def group_id_for(backing_id: bytes, created_at: int) -> str:
    return f"cart_{encode_hash(backing_id)}_{created_at}"
