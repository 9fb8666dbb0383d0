from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, Iterable, List, Optional, Set
from pymongo.errors import OperationFailure, PyMongoError
from schemas.appointment import Appointment, AppointmentStatus
from schemas.dashboard import DashboardSnapshot, DashboardStats
from config.database import Database
from crud.appointment_crud import get_appointments_with_clients
from crud.errors import StoreError, StoreUnreachable
from services.catalog_service import CatalogProvider
import asyncio
import logging

logger = logging.getLogger(__name__)

DASHBOARD_UNREACHABLE_MESSAGE = (
    "The clinical server is currently unreachable. "
    "Check if the database is paused or offline."
)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def compute_stats(appointments: Iterable[Appointment], today: date) -> DashboardStats:
    """Counts over the full appointment set.

    Dates are zero-padded ISO strings, so string comparison orders them
    chronologically.
    """
    today_str = today.isoformat()
    stats = DashboardStats()
    for appointment in appointments:
        stats.total += 1
        if appointment.appointment_date == today_str:
            stats.today += 1
        elif appointment.appointment_date > today_str:
            stats.upcoming += 1
        if appointment.status == AppointmentStatus.PENDING:
            stats.pending += 1
    return stats


def filter_appointments(appointments: Iterable[Appointment], term: Optional[str]) -> List[Appointment]:
    """Case-insensitive match on the client's name or the service type."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(appointments)

    matches = []
    for appointment in appointments:
        name = appointment.clients.full_name.lower() if appointment.clients else ""
        if needle in name or needle in appointment.service_type.lower():
            matches.append(appointment)
    return matches


class DashboardAggregator:
    """Holds the admin dashboard state and rebuilds it from the store."""

    def __init__(self, db: Database, catalog: CatalogProvider, today: Callable[[], date] = utc_today):
        self.db = db
        self.catalog = catalog
        self.today = today
        self.appointments: List[Appointment] = []
        self.stats = DashboardStats()
        self.error: Optional[str] = None
        self.last_refreshed: Optional[datetime] = None
        self._subscribers: Set[asyncio.Queue] = set()

    async def refresh(self) -> DashboardSnapshot:
        self.error = None
        appointments_result, _ = await asyncio.gather(
            get_appointments_with_clients(self.db),
            self.catalog.refresh(),
            return_exceptions=True
        )

        if isinstance(appointments_result, StoreError):
            if isinstance(appointments_result, StoreUnreachable):
                self.error = DASHBOARD_UNREACHABLE_MESSAGE
            else:
                self.error = appointments_result.message
            logger.error(f"Dashboard fetch error: {appointments_result.message}")
        elif isinstance(appointments_result, BaseException):
            raise appointments_result
        else:
            self.appointments = appointments_result
            self.stats = compute_stats(self.appointments, self.today())
            self.last_refreshed = datetime.now(timezone.utc)

        snapshot = self.snapshot()
        self._publish(snapshot)
        return snapshot

    def snapshot(self, search: Optional[str] = None) -> DashboardSnapshot:
        return DashboardSnapshot(
            appointments=filter_appointments(self.appointments, search),
            services=self.catalog.list_services(),
            stats=self.stats,
            error=self.error,
            last_refreshed=self.last_refreshed
        )

    def _publish(self, snapshot: DashboardSnapshot) -> None:
        for queue in list(self._subscribers):
            # Only the latest snapshot matters to a slow reader
            while not queue.empty():
                queue.get_nowait()
            queue.put_nowait(snapshot)

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._subscribers.add(queue)
        try:
            yield queue
        finally:
            self._subscribers.discard(queue)


class LiveRefresher:
    """Turns bursts of change notifications into one refresh at a time.

    Notifications that arrive while a refresh is running collapse into a
    single follow-up refresh.
    """

    def __init__(self, refresh: Callable[[], Awaitable[object]]):
        self._refresh = refresh
        self._pending = asyncio.Event()

    def notify(self, change: Optional[dict] = None) -> None:
        self._pending.set()

    async def run(self) -> None:
        while True:
            await self._pending.wait()
            self._pending.clear()
            try:
                await self._refresh()
            except Exception:
                logger.exception("Live dashboard refresh failed")


async def watch_appointment_changes(db: Database, on_change: Callable[[dict], None]) -> None:
    """Forward every insert/update/delete on appointments to ``on_change``.

    Change streams need a replica set; on a standalone server this logs and
    returns, leaving the dashboard on manual sync.
    """
    try:
        async with db.appointments.watch() as stream:
            logger.info("Watching appointments for changes")
            async for change in stream:
                on_change(change)
    except OperationFailure as e:
        logger.warning(f"Realtime updates unavailable, change streams not supported: {e}")
    except PyMongoError as e:
        logger.error(f"Appointment change stream stopped: {e}")
