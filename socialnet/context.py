"""
Application context - the process-wide collaborators, created once and
handed to services through FastAPI dependencies.
"""

import logging
from dataclasses import dataclass

from socialnet.config import Settings
from socialnet.core.mailer import EmailSender
from socialnet.core.realtime import RealtimePublisher
from socialnet.core.storage import ImageStore
from socialnet.database import Database

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    database: Database
    image_store: ImageStore
    realtime: RealtimePublisher
    mailer: EmailSender

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        return cls(
            settings=settings,
            database=Database.from_settings(settings),
            image_store=ImageStore(settings),
            realtime=RealtimePublisher(settings),
            mailer=EmailSender(),
        )

    async def startup(self) -> None:
        await self.database.connect()
        await self.realtime.connect()
        logger.info("Application context started")

    async def shutdown(self) -> None:
        await self.realtime.disconnect()
        await self.database.dispose()
        logger.info("Application context stopped")
