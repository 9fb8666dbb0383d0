from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from typing import Optional
import logging
import asyncio
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

logger = logging.getLogger('database')


class Database:
    MAX_RETRIES = 3
    RETRY_DELAY = 1  # seconds
    REQUIRED_COLLECTIONS = ['clients', 'appointments', 'services', 'staff_users', 'sessions']

    def __init__(self, url: Optional[str] = None, name: str = 'clinic_db', client=None):
        """A handle on the clinic store.

        Pass ``client`` to reuse an already constructed motor-compatible client
        (tests hand in an in-memory one); otherwise call ``connect()``.
        """
        self.url = url
        self.name = name
        self.client = client
        self.db = client[name] if client is not None else None

    async def connect(self):
        """Create database connection with retries."""
        retries = 0
        last_error = None

        if not self.url:
            raise ValueError("MONGODB_URL environment variable is not set")

        while retries < self.MAX_RETRIES:
            try:
                logger.info(f"Attempting to connect to MongoDB (Attempt {retries + 1}/{self.MAX_RETRIES})")

                self.client = AsyncIOMotorClient(
                    self.url,
                    serverSelectionTimeoutMS=5000,
                    connectTimeoutMS=10000,
                    socketTimeoutMS=10000,
                    maxPoolSize=50,
                    retryWrites=True,
                    retryReads=True,
                    tz_aware=True
                )
                self.db = self.client[self.name]

                # Test the connection
                await self.db.command('ping')

                logger.info(f"Successfully connected to MongoDB database: {self.name}")

                await self.ensure_collections()
                return

            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                last_error = e
                retries += 1
                if retries < self.MAX_RETRIES:
                    logger.warning(f"Failed to connect to MongoDB (Attempt {retries}/{self.MAX_RETRIES}). Retrying in {self.RETRY_DELAY} seconds...")
                    await asyncio.sleep(self.RETRY_DELAY)
                continue
            except Exception as e:
                logger.error(f"Unexpected error connecting to MongoDB: {str(e)}")
                raise

        logger.error(f"Failed to connect to MongoDB after {self.MAX_RETRIES} attempts")
        raise last_error

    async def ensure_collections(self):
        """Create missing collections and the lookup indexes."""
        collections = await self.db.list_collection_names()
        for collection in self.REQUIRED_COLLECTIONS:
            if collection not in collections:
                await self.db.create_collection(collection)
                logger.info(f"Created collection: {collection}")

        await self.clients.create_index([("id", ASCENDING)], unique=True)
        await self.appointments.create_index([("id", ASCENDING)], unique=True)
        await self.appointments.create_index([("created_at", ASCENDING)])
        await self.services.create_index([("id", ASCENDING)], unique=True)
        await self.staff_users.create_index([("email", ASCENDING)], unique=True)
        await self.sessions.create_index([("token", ASCENDING)], unique=True)

    async def close(self):
        """Close database connection."""
        if self.client is not None:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed.")

    def _collection(self, name: str) -> AsyncIOMotorCollection:
        if self.db is None:
            raise RuntimeError("Database not initialized. Call connect() first.")
        return self.db[name]

    @property
    def clients(self) -> AsyncIOMotorCollection:
        return self._collection('clients')

    @property
    def appointments(self) -> AsyncIOMotorCollection:
        return self._collection('appointments')

    @property
    def services(self) -> AsyncIOMotorCollection:
        return self._collection('services')

    @property
    def staff_users(self) -> AsyncIOMotorCollection:
        return self._collection('staff_users')

    @property
    def sessions(self) -> AsyncIOMotorCollection:
        return self._collection('sessions')

