"""
Application service: prebookings for out-of-stock vegetables.
"""
from datetime import date
from typing import Any, Dict, List, Optional
import logging

from pydantic import BaseModel

from farm_market.domain.errors import DuplicatePreBookingError, NotFoundError, ValidationError
from farm_market.domain.models import (
    OPEN_PREBOOKING_STATUSES,
    PreBooking,
    PreBookingStatus,
    RowId,
)
from farm_market.infrastructure.api_constants import DatabaseTables
from farm_market.infrastructure.database_client import DatabaseClient
from farm_market.utils.timestamps import utcnow_iso

logger = logging.getLogger(__name__)


class SellerPreBookingStats(BaseModel):
    """Prebooking totals for a seller dashboard."""
    total_prebookings: int = 0
    pending_prebookings: int = 0
    accepted_prebookings: int = 0
    completed_prebookings: int = 0
    total_quantity: float = 0.0
    total_value: float = 0.0
    fulfillment_rate: float = 0.0


class PreBookingService:
    """
    Application service for prebookings.

    A buyer may hold only one open (pending, accepted or in progress)
    prebooking per seller and vegetable.
    """

    def __init__(self, db: DatabaseClient):
        self.db = db

    async def find_open_prebooking(
        self,
        user_id: RowId,
        seller_id: RowId,
        vegetable_name: str,
    ) -> Optional[PreBooking]:
        row = await self.db.select_one(
            DatabaseTables.PREBOOKINGS,
            {
                "user_id": user_id,
                "seller_id": seller_id,
                "vegetable_name": vegetable_name,
                "status": [s.value for s in OPEN_PREBOOKING_STATUSES],
            },
        )
        return PreBooking(**row) if row else None

    async def create_prebooking(
        self,
        user_id: RowId,
        seller_id: RowId,
        vegetable_name: str,
        quantity: float,
        unit: str = "kg",
        category: Optional[str] = None,
        estimated_price: Optional[float] = None,
        target_date: Optional[date] = None,
        user_notes: Optional[str] = None,
    ) -> PreBooking:
        """
        Create a pending prebooking.

        Raises:
            ValidationError: If quantity is not positive
            DuplicatePreBookingError: If an open prebooking already exists
                for the same user, seller and vegetable
        """
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")

        existing = await self.find_open_prebooking(user_id, seller_id, vegetable_name)
        if existing is not None:
            logger.warning(
                f"Duplicate prebooking for user {user_id}, seller {seller_id}, {vegetable_name!r}"
            )
            raise DuplicatePreBookingError(
                f"You already have a {existing.status.value} prebooking for {vegetable_name}",
                existing_status=existing.status.value,
            )

        now = utcnow_iso()
        rows = await self.db.insert(
            DatabaseTables.PREBOOKINGS,
            {
                "user_id": user_id,
                "seller_id": seller_id,
                "vegetable_name": vegetable_name,
                "category": category,
                "quantity": quantity,
                "unit": unit,
                "estimated_price": estimated_price,
                "target_date": target_date.isoformat() if target_date else None,
                "user_notes": (user_notes or "").strip() or None,
                "status": PreBookingStatus.PENDING.value,
                "created_at": now,
                "updated_at": now,
            },
        )
        prebooking = PreBooking(**rows[0])
        logger.info(f"Created prebooking {prebooking.id}: {quantity:g}{unit} {vegetable_name}")
        return prebooking

    async def list_for_user(self, user_id: RowId) -> List[PreBooking]:
        rows = await self.db.select(
            DatabaseTables.PREBOOKINGS, filters={"user_id": user_id}, order="created_at.desc"
        )
        return [PreBooking(**row) for row in rows]

    async def list_for_seller(self, seller_id: RowId) -> List[PreBooking]:
        rows = await self.db.select(
            DatabaseTables.PREBOOKINGS, filters={"seller_id": seller_id}, order="target_date.asc"
        )
        return [PreBooking(**row) for row in rows]

    async def update_status(
        self,
        prebooking_id: RowId,
        status: PreBookingStatus,
        seller_notes: Optional[str] = None,
        user_notes: Optional[str] = None,
    ) -> PreBooking:
        patch: Dict[str, Any] = {
            "status": PreBookingStatus(status).value,
            "updated_at": utcnow_iso(),
        }
        if seller_notes is not None:
            patch["seller_notes"] = seller_notes
        if user_notes is not None:
            patch["user_notes"] = user_notes

        rows = await self.db.update(DatabaseTables.PREBOOKINGS, patch, {"id": prebooking_id})
        if not rows:
            raise NotFoundError(f"Prebooking {prebooking_id} not found")
        logger.info(f"Prebooking {prebooking_id} is now {patch['status']}")
        return PreBooking(**rows[0])

    async def cancel(self, prebooking_id: RowId, reason: Optional[str] = None) -> PreBooking:
        notes = f"Cancelled: {reason}" if reason else "Cancelled by user"
        return await self.update_status(
            prebooking_id, PreBookingStatus.CANCELLED, user_notes=notes
        )

    async def seller_stats(self, seller_id: RowId) -> SellerPreBookingStats:
        rows = await self.db.select(
            DatabaseTables.PREBOOKINGS,
            filters={"seller_id": seller_id},
            columns="status,quantity,estimated_price",
        )
        total = len(rows)
        if total == 0:
            return SellerPreBookingStats()

        def count(status: PreBookingStatus) -> int:
            return sum(1 for r in rows if r.get("status") == status.value)

        completed = count(PreBookingStatus.DELIVERED)
        return SellerPreBookingStats(
            total_prebookings=total,
            pending_prebookings=count(PreBookingStatus.PENDING),
            accepted_prebookings=count(PreBookingStatus.ACCEPTED),
            completed_prebookings=completed,
            total_quantity=sum(float(r.get("quantity") or 0) for r in rows),
            total_value=sum(
                float(r.get("estimated_price") or 0) * float(r.get("quantity") or 0)
                for r in rows
            ),
            fulfillment_rate=round(completed / total * 100, 1),
        )
