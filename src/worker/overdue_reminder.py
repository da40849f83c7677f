"""Overdue Reminder Background Worker

Periodically moves SENT invoices past their due date to OVERDUE, tenant by
tenant. Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyInvoiceLineRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyPatientRepository,
    SqlAlchemyPaymentRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.invoicing import OverdueSweepResultDTO, RemindOverdueInvoices
from src.app.use_cases.invoicing.invoice_reader import InvoiceReader
from src.domain.base import utc_now

logger = logging.getLogger(__name__)


class OverdueReminderWorker:
    """
    Background worker for the overdue sweep

    Features:
    - Runs RemindOverdueInvoices for every tenant with past-due SENT
      invoices, one session per tenant
    - A failing tenant is logged and skipped, the others still run
    - Can run once or continuously

    Usage:
        # Run once
        worker = OverdueReminderWorker()
        result = await worker.run_once()

        # Run continuously
        worker = OverdueReminderWorker()
        await worker.run_forever(interval_seconds=3600)  # Hourly
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        session_factory: Optional[sessionmaker] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            session_factory: Existing session factory; when given, no engine
                is created and shutdown() leaves it alone
        """
        self.engine = None
        if session_factory is None:
            self.engine = create_async_engine(
                db_uri or ApplicationConfig.DB_URI, echo=False, future=True
            )
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
        self.async_session_factory = session_factory

        logger.info("OverdueReminderWorker initialized")

    async def _tenant_ids(self, now: datetime):
        # Tenants are read from invoices, a tenant may have no row in tenants
        async with self.async_session_factory() as session:
            return await SqlAlchemyInvoiceRepository(session).list_tenant_ids_with_overdue(now)

    async def _sweep_tenant(self, tenant_id: str, now: datetime):
        async with self.async_session_factory() as session:
            use_case = RemindOverdueInvoices(
                uow=SqlAlchemyUnitOfWork(session),
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                reader=InvoiceReader(
                    SqlAlchemyInvoiceLineRepository(session),
                    SqlAlchemyPatientRepository(session),
                    SqlAlchemyPaymentRepository(session),
                ),
            )
            return await use_case.execute(tenant_id, now=now)

    async def run_once(self, now: Optional[datetime] = None) -> OverdueSweepResultDTO:
        """
        Run the sweep once over all tenants

        Returns:
            OverdueSweepResultDTO with per-tenant counts
        """
        now = now or utc_now()

        if not ApplicationConfig.OVERDUE_REMINDER_ENABLED:
            logger.info("Overdue reminder is disabled, skipping")
            return OverdueSweepResultDTO(
                tenants_checked=0,
                invoices_marked_overdue=0,
                sweep_time=now,
                execution_time_ms=0,
            )

        started = time.perf_counter()
        tenant_ids = await self._tenant_ids(now)
        per_tenant = {}
        failed = []

        for tenant_id in tenant_ids:
            result = await self._sweep_tenant(tenant_id, now)
            if result.is_err():
                logger.error(
                    f"Overdue sweep failed for tenant {tenant_id}: {result.error.message}"
                )
                failed.append(tenant_id)
                continue
            if result.value:
                per_tenant[tenant_id] = len(result.value)

        response = OverdueSweepResultDTO(
            tenants_checked=len(tenant_ids),
            invoices_marked_overdue=sum(per_tenant.values()),
            per_tenant=per_tenant,
            failed_tenants=failed,
            sweep_time=now,
            execution_time_ms=int((time.perf_counter() - started) * 1000),
        )

        if failed:
            logger.warning(f"Overdue sweep failed for {len(failed)} tenant(s)")

        return response

    async def run_forever(self, interval_seconds: Optional[int] = None):
        """
        Run the sweep continuously at specified interval

        Args:
            interval_seconds: Seconds between runs
                (default: OVERDUE_REMINDER_INTERVAL_SECONDS)
        """
        interval_seconds = interval_seconds or ApplicationConfig.OVERDUE_REMINDER_INTERVAL_SECONDS
        logger.info(f"Starting continuous overdue reminder with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Overdue sweep complete. "
                    f"Checked {result.tenants_checked} tenants, "
                    f"marked {result.invoices_marked_overdue} invoices overdue "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Overdue sweep cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("OverdueReminderWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.overdue_reminder --once

        # Run continuously with custom interval (in seconds)
        python -m src.worker.overdue_reminder --interval 600
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Overdue Invoice Reminder Worker")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int, default=None,
        help="Interval between runs in seconds (default from config)"
    )
    args = parser.parse_args()

    worker = OverdueReminderWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Overdue sweep complete:")
            print(f"  Tenants checked: {result.tenants_checked}")
            print(f"  Invoices marked overdue: {result.invoices_marked_overdue}")
            print(f"  Execution time: {result.execution_time_ms}ms")
            for tenant_id, count in result.per_tenant.items():
                print(f"  - Tenant {tenant_id}: {count}")
            for tenant_id in result.failed_tenants:
                print(f"  - Tenant {tenant_id}: FAILED")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
