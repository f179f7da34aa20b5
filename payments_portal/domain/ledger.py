"""Ledger building - turns a deal's installment fields into a payment summary"""

import math
from typing import Any, List, Optional
from payments_portal.domain.models import Deal, Ledger, Payment


def parse_number(value: Any) -> Optional[float]:
    """
    Coerce a CRM property value to a finite float.

    Returns None for missing, blank, non-numeric, NaN or infinite values.
    Underscore digit separators are rejected (the CRM never emits them).
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None

    return number if math.isfinite(number) else None


def parse_payment_field(raw: Optional[str]) -> Optional[Payment]:
    """
    Parse one "<amount>,<transactionId>,<date>" installment field.

    Trailing parts are optional. Fields with no leading numeric amount are
    malformed and yield None; this never raises.

    Example:
        "150.00, TXN123, 2024-01-05" → Payment(150.0, "TXN123", "2024-01-05")
        ",TXN999," → None
    """
    if not raw:
        return None

    parts = [part.strip() for part in str(raw).split(",")]
    if not parts[0]:
        return None

    amount = parse_number(parts[0])
    if amount is None:
        return None

    return Payment(
        amount=amount,
        transaction_id=parts[1] if len(parts) > 1 else "",
        date=parts[2] if len(parts) > 2 else "",
    )


def build_ledger(deal: Deal) -> Ledger:
    """
    Compute the payment summary for a deal.

    Requirements:
    - Payments keep payment_1..payment_5 field order, not date order
    - Total paid prefers the deal's total-paid override when numeric,
      otherwise the sum of parsed payments (0 with none)
    - Total paid is unavailable when the sum overflows to infinity
    - Remaining is only available when both fee and total are

    No rounding is applied; formatting happens at render time.
    """
    program_fee = parse_number(deal.program_fee)

    payments: List[Payment] = []
    for raw in deal.raw_payment_fields:
        payment = parse_payment_field(raw)
        if payment is not None:
            payments.append(payment)

    override = parse_number(deal.total_paid_override)
    total_paid: Optional[float] = override if override is not None else sum((p.amount for p in payments), 0.0)
    if not math.isfinite(total_paid):
        # Finite installments can still overflow when summed
        total_paid = None

    remaining = program_fee - total_paid if program_fee is not None and total_paid is not None else None
    if remaining is not None and not math.isfinite(remaining):
        remaining = None

    return Ledger(
        program_fee=program_fee,
        total_paid=total_paid,
        remaining=remaining,
        payments=tuple(payments),
    )
