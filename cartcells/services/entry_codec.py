# cartcells/services/entry_codec.py
from dataclasses import dataclass
from typing import Any, Union

import msgpack
from msgpack.exceptions import UnpackException

from cartcells.domain.errors import DecodeError
from cartcells.domain.schemas import Cart


@dataclass(frozen=True)
class Decoded:
    cart: Cart

    def unwrap(self) -> Cart:
        return self.cart


@dataclass(frozen=True)
class DecodeFailed:
    error: DecodeError

    def unwrap(self) -> Cart:
        raise self.error


DecodeResult = Union[Decoded, DecodeFailed]


def _entry_bytes(record: Any) -> bytes:
    #record.entry.Present.entry - inne warianty (Hidden, NotApplicable) nie maja tresci
    try:
        payload = record["entry"]["Present"]["entry"]
    except (KeyError, TypeError):
        raise DecodeError("Rekord bez obecnego wpisu")

    if not isinstance(payload, (bytes, bytearray)):
        raise DecodeError(f"Wpis nie jest binarny: {type(payload).__name__}")
    return bytes(payload)


def decode_record(record: Any) -> DecodeResult:
    """
    Dekoduje jeden surowy rekord do Cart.
    Nie rzuca - blad zwracany jako DecodeFailed, zeby batch mogl isc dalej.
    """
    try:
        raw = _entry_bytes(record)
        data = msgpack.unpackb(raw, raw=False)
        return Decoded(Cart.model_validate(data))
    except DecodeError as e:
        return DecodeFailed(e)
    except (UnpackException, ValueError, TypeError) as e:
        # ValidationError pydantic dziedziczy po ValueError
        return DecodeFailed(DecodeError(f"Nie mozna zdekodowac koszyka: {e}"))


def encode_cart_entry(cart: Cart) -> bytes:
    """Odwrotnosc decode_record dla samego wpisu (uzywane przez mock conductora)."""
    data = cart.model_dump(by_alias=True, mode="python")
    data["status"] = cart.status.value
    return msgpack.packb(data, use_bin_type=True)


def make_record(cart: Cart) -> dict:
    return {"entry": {"Present": {"entry": encode_cart_entry(cart)}}}
