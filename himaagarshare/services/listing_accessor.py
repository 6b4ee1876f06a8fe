"""Read-only view of catalog listings for the booking core."""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from himaagarshare.domain.pricing import to_decimal
from himaagarshare.models.listing import Listing

LISTING_ACTIVE = "active"


@dataclass(frozen=True)
class ListingCapacity:
    """The catalog fields capacity and pricing decisions depend on."""

    id: UUID
    owner_id: UUID
    total_capacity: Decimal
    price_per_unit_day: Decimal
    status: str

    @property
    def is_active(self) -> bool:
        return self.status == LISTING_ACTIVE


class ListingCapacityAccessor:
    """Never writes; ``lock=True`` takes a row lock that lasts until commit."""

    async def get_active_listing(
        self,
        db: AsyncSession,
        listing_id: UUID,
        *,
        lock: bool = False,
    ) -> ListingCapacity | None:
        """Return the listing view, or None if the catalog has no such listing.

        The status is returned as-is; callers decide whether an inactive
        listing is acceptable.
        """
        query = select(Listing).where(Listing.id == listing_id)
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(query)
        listing = result.scalar_one_or_none()
        if listing is None:
            return None
        return ListingCapacity(
            id=listing.id,
            owner_id=listing.owner_id,
            total_capacity=to_decimal(listing.total_capacity),
            price_per_unit_day=to_decimal(listing.price_per_unit_day),
            status=listing.status,
        )


listing_accessor = ListingCapacityAccessor()
