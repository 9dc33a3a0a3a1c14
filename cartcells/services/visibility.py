# cartcells/services/visibility.py
from cartcells.domain.schemas import Cart

SCANNER_ROLE = "scanner"


def is_visible(cart: Cart, role: str, self_identity: str) -> bool:
    #skaner widzi wszystko, kazda inna rola tylko swoje koszyki
    if role == SCANNER_ROLE:
        return True
    return cart.owner == self_identity
