"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Tuple

# Deal properties requested from the CRM, in display order for installments
PAYMENT_FIELDS: Tuple[str, ...] = (
    "payment_1",
    "payment_2",
    "payment_3",
    "payment_4",
    "payment_5",
)
DEAL_PROPERTIES: Tuple[str, ...] = ("dealname", "amount", "total_amount_paid", *PAYMENT_FIELDS)
CONTACT_PROPERTIES: Tuple[str, ...] = ("email", "firstname", "lastname")


@dataclass(frozen=True)
class Contact:
    """CRM contact matched by email"""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@dataclass(frozen=True)
class Deal:
    """
    CRM deal (an enrolled program) with its raw financial properties.

    Numeric properties are kept as the CRM sent them; the ledger builder
    does the coercion. `context_email` / `context_origin` are stamped by the
    resolver after fetch and are never read from the CRM.
    """

    id: str
    name: Optional[str]
    program_fee: Optional[str]
    total_paid_override: Optional[str]
    raw_payment_fields: Tuple[Optional[str], ...] = (None,) * len(PAYMENT_FIELDS)
    context_email: str = ""
    context_origin: str = ""

    @classmethod
    def from_properties(cls, deal_id: str, properties: Mapping[str, Optional[str]]) -> "Deal":
        """Build a Deal from a CRM property map"""
        return cls(
            id=str(deal_id),
            name=properties.get("dealname"),
            program_fee=properties.get("amount"),
            total_paid_override=properties.get("total_amount_paid"),
            raw_payment_fields=tuple(properties.get(key) for key in PAYMENT_FIELDS),
        )

    def with_context(self, email: Optional[str], origin: Optional[str]) -> "Deal":
        """Return a copy carrying the caller's email and origin for link building"""
        return replace(self, context_email=email or "", context_origin=origin or "")


@dataclass(frozen=True)
class Payment:
    """Single installment parsed from a deal payment field"""

    amount: float
    transaction_id: str = ""
    date: str = ""  # as entered in the CRM, not normalised


@dataclass(frozen=True)
class Ledger:
    """Normalised payment history and balance for one deal"""

    program_fee: Optional[float]  # None when the fee is missing or not numeric
    total_paid: Optional[float]  # None only when the installment sum overflows
    remaining: Optional[float]  # None unless fee and total are both available
    payments: Tuple[Payment, ...] = field(default_factory=tuple)

    @property
    def has_balance_due(self) -> bool:
        return self.remaining is not None and self.remaining > 0
