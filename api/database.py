"""MongoDB connection management."""

from __future__ import annotations

import os
import re
from time import time

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from opentelemetry import trace

logger = structlog.get_logger(__name__)

COLLECTIONS = ("users", "notes", "chats", "messages")


def mask_connection_string(url: str) -> str:
    """Mask the password in a MongoDB connection string."""
    pattern = r"(mongodb(?:\+srv)?://[^:]+:)([^@]+)(@.+)"
    return re.sub(pattern, r"\1****\3", url)


class Database:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    @classmethod
    async def connect(cls) -> None:
        """Establish connection to MongoDB."""
        tracer = trace.get_tracer(__name__)

        with tracer.start_as_current_span("db.connect") as span:
            mongo_url = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
            db_name = os.getenv("MONGODB_DB_NAME", "thoughtsort")
            init_db = os.getenv("INIT_DB", "true").lower() == "true"

            span.set_attribute("db.system", "mongodb")
            span.set_attribute("db.name", db_name)

            logger.info("mongodb_connecting", url=mask_connection_string(mongo_url), database=db_name)

            cls.client = AsyncIOMotorClient(mongo_url)
            cls.db = cls.client[db_name]

            start_time = time()
            await cls.client.admin.command("ping")
            duration = (time() - start_time) * 1000

            logger.info("mongodb_connected", ping_ms=round(duration, 2))

            if init_db:
                await cls.initialize_collections()
                logger.info("database_initialization_completed")

    @classmethod
    async def initialize_collections(cls) -> None:
        """Create missing collections and ensure indexes. Safe to run repeatedly."""
        tracer = trace.get_tracer(__name__)

        with tracer.start_as_current_span("db.initialize_collections"):
            if cls.db is None:
                raise RuntimeError("Database not connected")

            existing_collections = await cls.db.list_collection_names()
            for name in COLLECTIONS:
                if name not in existing_collections:
                    await cls.db.create_collection(name)
                    logger.info("collection_created", collection=name)
                else:
                    logger.debug("collection_exists", collection=name)

            await cls.db.users.create_index("email", unique=True)
            logger.debug("index_ensured", collection="users", field="email", unique=True)

            # Note listing: owner, most recently updated first
            await cls.db.notes.create_index([("user_id", 1), ("updated_at", -1)])
            logger.debug("compound_index_ensured", collection="notes", fields=["user_id", "updated_at"])

            await cls.db.chats.create_index([("user_id", 1), ("updated_at", -1)])
            await cls.db.chats.create_index([("user_id", 1), ("note_id", 1)])
            logger.debug("compound_index_ensured", collection="chats", fields=["user_id", "note_id"])

            await cls.db.messages.create_index([("chat_id", 1), ("created_at", 1)])
            logger.debug("compound_index_ensured", collection="messages", fields=["chat_id", "created_at"])

    @classmethod
    async def disconnect(cls) -> None:
        """Close MongoDB connection."""
        if cls.client:
            logger.info("mongodb_disconnecting")
            cls.client.close()
            logger.info("mongodb_disconnected")

    @classmethod
    def get_database(cls) -> AsyncIOMotorDatabase:
        """Get the database instance."""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return cls.db


def get_db() -> AsyncIOMotorDatabase:
    """Get the database instance."""
    return Database.get_database()
