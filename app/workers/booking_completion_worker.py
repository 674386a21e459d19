"""Executable worker that marks bookings past their end date as completed."""

from __future__ import annotations

import asyncio
import logging
import os
from uuid import UUID

from app.core.config import get_settings
from app.core.database import close_engine, session_scope
from app.modules.audit.repository import AuditRepository
from app.modules.booking.repository import BookingRepository
from app.modules.booking.service import BookingService
from app.modules.lifecycle.policy import LifecyclePolicy

logger = logging.getLogger(__name__)


async def run_cycle() -> list[UUID]:
    """Run a single completion sweep in one DB transaction."""
    settings = get_settings()
    async with session_scope() as session:
        service = BookingService(
            booking_repository=BookingRepository(session),
            audit_repository=AuditRepository(session),
            policy=LifecyclePolicy.from_settings(settings),
        )
        return await service.complete_ended_bookings()


async def main() -> None:
    """Run once or keep polling according to worker mode."""
    settings = get_settings()
    logging.basicConfig(level=os.getenv("BOOKING_COMPLETION_LOG_LEVEL", settings.log_level))
    mode = os.getenv("BOOKING_COMPLETION_MODE", "once").strip().lower()

    try:
        if mode == "once":
            completed = await run_cycle()
            logger.info("Booking completion sweep completed %s booking(s)", len(completed))
            return

        while True:
            try:
                completed = await run_cycle()
                logger.info("Booking completion sweep completed %s booking(s)", len(completed))
            except Exception:
                logger.exception("Booking completion sweep failed")
            await asyncio.sleep(settings.booking_completion_poll_seconds)
    finally:
        await close_engine()


if __name__ == "__main__":
    asyncio.run(main())
