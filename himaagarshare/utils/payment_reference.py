"""Payment reference generation."""

from uuid import UUID

PAYMENT_REFERENCE_PREFIX = "MOCK_PAY_"


def generate_payment_reference(booking_id: UUID) -> str:
    """Deterministic payment-pending marker for a booking.

    Args:
        booking_id: Booking primary key

    Returns:
        str: Reference like 'MOCK_PAY_3F2A9C0B17D4'
    """
    return f"{PAYMENT_REFERENCE_PREFIX}{booking_id.hex[:12].upper()}"
