"""Mock payment gateway: every charge and refund succeeds immediately."""

import logging
from decimal import Decimal

from himaagarshare.gateways.base import (
    GatewayType,
    PaymentResult,
    PaymentStub,
    RefundResult,
)

logger = logging.getLogger(__name__)


class MockPaymentGateway(PaymentStub):
    """No settlement happens; transaction ids derive from the reference."""

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.MOCK

    async def charge(
        self,
        reference_id: str,
        amount: Decimal,
        description: str,
    ) -> PaymentResult:
        logger.info(f"Mock charge {reference_id}: {amount} ({description})")
        return PaymentResult(
            success=True,
            transaction_id=reference_id,
            raw_response={"type": "mock", "status": "paid", "amount": str(amount)},
        )

    async def refund(
        self,
        transaction_id: str,
        amount: Decimal,
        reason: str,
    ) -> RefundResult:
        logger.info(f"Mock refund {transaction_id}: {amount} ({reason})")
        return RefundResult(
            success=True,
            refund_id=f"REFUND_{transaction_id}",
            raw_response={"type": "mock", "status": "refunded", "amount": str(amount)},
        )


_gateway = MockPaymentGateway()


def get_payment_gateway() -> PaymentStub:
    """FastAPI dependency returning the configured payment stub."""
    return _gateway
