"""Sale draft model: the in-memory cart built at the till."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
import enum
import uuid


class PaymentMethod(enum.Enum):
    """Payment methods accepted by the sales endpoint."""
    CASH = "CASH"
    CARD = "CARD"
    MOBILE_MONEY = "MOBILE_MONEY"
    CHECK = "CHECK"


def normalize_payment_method(value) -> PaymentMethod:
    """
    Normalize a payment method coming from a form or JSON body.

    Raises:
        ValueError: If value is not one of the accepted methods
    """
    if value is None or value == '':
        return PaymentMethod.CASH
    if isinstance(value, PaymentMethod):
        return value
    normalized = str(value).upper().strip()
    try:
        return PaymentMethod(normalized)
    except ValueError:
        raise ValueError(f"Mode de paiement invalide: {value}")


@dataclass
class CartLine:
    """
    One product in the cart.

    unit_price is frozen when the line is created; the subtotal is always
    derived from it so it can never go stale.
    """
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return (self.unit_price * self.quantity).quantize(Decimal('0.01'))

    def __repr__(self):
        return f"<CartLine(product_id={self.product_id}, quantity={self.quantity}, unit_price={self.unit_price})>"


@dataclass
class SaleDraft:
    """
    Sale Draft - the cart plus everything the sale endpoint needs.

    One draft per browser session. Lines keep insertion order and never
    share a product_id.
    """
    draft_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    store_id: Optional[str] = None
    cash_register_id: Optional[str] = None
    lines: List[CartLine] = field(default_factory=list)
    discount: Decimal = Decimal('0.00')
    tax: Decimal = Decimal('0.00')
    payment_method: PaymentMethod = PaymentMethod.CASH
    amount_paid: Decimal = Decimal('0.00')
    notes: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find_line(self, product_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def __repr__(self):
        return f"<SaleDraft(draft_id={self.draft_id}, store_id={self.store_id}, lines={len(self.lines)})>"
