"""Payment stub: approves cards starting with 4 up to a configured amount."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from storefront.common.errors import ValidationError

from ..metrics import PAYMENTS_TOTAL
from ..schemas import PaymentRequest

_LOGGER = logging.getLogger(__name__)

APPROVED_CARD_PREFIX = "4"


class PaymentDeclined(ValidationError):
    default_message = "Payment failed. Invalid card or amount exceeds limit"


@dataclass(frozen=True)
class PaymentResult:
    transaction_id: str
    status: str = "success"


class PaymentService:
    def __init__(self, amount_limit: Decimal) -> None:
        self.amount_limit = amount_limit

    async def process_payment(self, payload: PaymentRequest) -> PaymentResult:
        approved = payload.card_number.startswith(APPROVED_CARD_PREFIX) and payload.amount <= self.amount_limit
        if not approved:
            PAYMENTS_TOTAL.labels(outcome="declined").inc()
            _LOGGER.info("Declined payment of %s on card ending %s", payload.amount, payload.card_number[-4:])
            raise PaymentDeclined()

        PAYMENTS_TOTAL.labels(outcome="approved").inc()
        return PaymentResult(transaction_id=f"txn_{uuid.uuid4().hex[:16]}")
