from datetime import timedelta
from typing import Optional
from fastapi import Request
from config.database import Database
from config.settings import Settings
from services.ai_service import NoteSummarizer
from services.auth_service import AuthService
from services.catalog_service import CatalogProvider
from services.dashboard_service import DashboardAggregator, LiveRefresher, watch_appointment_changes
from services.notification_service import NotificationService
from services.session_guard import SessionGuard
from services.twilio_service import TwilioService
import asyncio
import logging

logger = logging.getLogger(__name__)


class AppContainer:
    """Builds every collaborator once and owns their start/stop.

    Routes reach these through ``request.app.state.container``; nothing is
    held in module globals.
    """

    def __init__(
        self,
        settings: Settings,
        db: Optional[Database] = None,
        summarizer: Optional[NoteSummarizer] = None,
        messenger: Optional[TwilioService] = None,
        realtime: Optional[bool] = None
    ):
        self.settings = settings
        self._owns_db = db is None
        self.db = db or Database(settings.mongodb_url, settings.database_name)
        self.realtime = settings.realtime_enabled if realtime is None else realtime

        self.catalog = CatalogProvider(self.db)
        self.auth = AuthService(self.db, timedelta(minutes=settings.session_ttl_minutes))
        self.guard = SessionGuard(self.auth)
        self.aggregator = DashboardAggregator(self.db, self.catalog)
        self.summarizer = summarizer or NoteSummarizer(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url
        )

        if messenger is None and settings.messaging_configured:
            messenger = TwilioService(
                settings.twilio_account_sid,
                settings.twilio_auth_token,
                settings.twilio_whatsapp_number
            )
        self.notifications = NotificationService(
            self.db,
            messenger=messenger,
            admin_number=settings.admin_whatsapp_number,
            clinic_name=settings.clinic_name
        )

        self.refresher = LiveRefresher(self.aggregator.refresh)
        self._tasks = []

    async def start(self):
        if self._owns_db:
            await self.db.connect()

        if self.realtime:
            self._tasks.append(asyncio.create_task(self.refresher.run()))
            self._tasks.append(asyncio.create_task(
                watch_appointment_changes(self.db, self.refresher.notify)
            ))
        logger.info("Application container started")

    async def stop(self):
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        if self._owns_db:
            await self.db.close()
        logger.info("Application container stopped")


def get_container(request: Request) -> AppContainer:
    """FastAPI dependency for the container built at startup."""
    return request.app.state.container
