import logging
from decimal import Decimal

from bson.codec_options import CodecOptions, TypeCodec, TypeRegistry
from bson.decimal128 import Decimal128
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.core.config import settings

logger = logging.getLogger(__name__)


class DecimalCodec(TypeCodec):
    """Store Python decimals as BSON Decimal128 and read them back as Decimal."""

    python_type = Decimal
    bson_type = Decimal128

    def transform_python(self, value: Decimal) -> Decimal128:
        return Decimal128(value)

    def transform_bson(self, value: Decimal128) -> Decimal:
        return value.to_decimal()


CODEC_OPTIONS = CodecOptions(
    tz_aware=True,
    type_registry=TypeRegistry([DecimalCodec()]),
)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URI)
    mongodb.db = mongodb.client.get_database(settings.MONGODB_DB, codec_options=CODEC_OPTIONS)

    await create_indexes()
    logger.info("Connected to MongoDB: %s", settings.MONGODB_DB)

async def disconnect_from_mongo():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    mongodb.client = None
    mongodb.db = None
    logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    # Incoming ledger lookups
    await mongodb.db[settings.INCOMING_COLLECTION].create_index("branch")
    await mongodb.db[settings.INCOMING_COLLECTION].create_index("last_updated")

    # Outgoing ledger lookups
    await mongodb.db[settings.OUTGOING_COLLECTION].create_index("branch")
    await mongodb.db[settings.OUTGOING_COLLECTION].create_index("entry_date")

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db

async def next_sequence(counters: AsyncIOMotorCollection, name: str) -> int:
    """
    Atomically allocate the next integer id for a named sequence.

    The counter document is created on first use, so the first id is 1.
    """
    doc = await counters.find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return int(doc["seq"])
