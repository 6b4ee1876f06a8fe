"""Payment stub interface.

The booking state machine only needs two operations: charge on approval and
refund on cancellation of a paid booking. Adapters must not hold business
logic, only gateway communication.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class GatewayType(str, Enum):
    """Supported payment gateways."""

    MOCK = "mock"


@dataclass
class PaymentResult:
    """Result of a charge."""

    success: bool
    transaction_id: str | None = None
    error_message: str | None = None
    raw_response: dict | None = None


@dataclass
class RefundResult:
    """Result of a refund."""

    success: bool
    refund_id: str | None = None
    error_message: str | None = None
    raw_response: dict | None = None


class PaymentStub(ABC):
    """Abstract base class for payment gateways."""

    @property
    @abstractmethod
    def gateway_type(self) -> GatewayType:
        """Return the gateway type."""

    @abstractmethod
    async def charge(
        self,
        reference_id: str,
        amount: Decimal,
        description: str,
    ) -> PaymentResult:
        """Capture payment for a booking.

        Args:
            reference_id: Payment reference assigned at booking creation
            amount: Booking total price
            description: Human readable description

        Returns:
            PaymentResult with transaction details
        """

    @abstractmethod
    async def refund(
        self,
        transaction_id: str,
        amount: Decimal,
        reason: str,
    ) -> RefundResult:
        """Return a previous charge in full.

        Args:
            transaction_id: Transaction returned by ``charge``
            amount: Amount to refund
            reason: Refund reason

        Returns:
            RefundResult with refund details
        """
