# cartcells/domain/errors.py


class CartCellsError(Exception):
    """Bazowy wyjatek warstwy koszykow."""


class TransportError(CartCellsError):
    """Wywolanie zdalne na komorce nie powiodlo sie (siec, status HTTP, zla odpowiedz)."""


class DecodeError(CartCellsError):
    """Rekord z komorki nie daje sie zdekodowac do koszyka."""


class RegistryUnavailable(CartCellsError):
    """Nie da sie ustalic zbioru komorek (enumeracja klonow padla)."""


class LifecycleError(CartCellsError):
    """Tworzenie koszyka przerwane - koszyk nie istnieje."""
