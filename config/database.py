# Database connection configuration
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from config.settings import get_settings
import logging

logger = logging.getLogger(__name__)
settings = get_settings()

class Database:
    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

    @classmethod
    async def connect_db(cls):
        try:
            cls.client = AsyncIOMotorClient(settings.mongo_url)
            cls.db = cls.client[settings.db_name]
            await create_indexes(cls.db)
            logger.info(f'Connected to MongoDB: {settings.db_name}')
        except Exception as e:
            logger.error(f'Failed to connect to MongoDB: {e}')
            raise

    @classmethod
    async def close_db(cls):
        if cls.client:
            cls.client.close()
            logger.info('Closed MongoDB connection')

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        return cls.db

async def create_indexes(db: AsyncIOMotorDatabase):
    # One status document and one stored report per scan
    await db.scan_status.create_index('scan_id', unique=True)
    await db.scan_status.create_index('created_at')
    await db.reports.create_index('scan_id', unique=True)
    await db.findings.create_index('scan_id')
    await db.artifacts.create_index('scan_id')

async def get_database() -> AsyncIOMotorDatabase:
    return Database.get_db()
