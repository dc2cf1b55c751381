"""
MongoDB Client Wrapper

Centralized MongoDB client wrapper on top of motor's AsyncIOMotorClient.
Provides service discovery integration and consistent database access pattern.

Usage:
    from core.mongo_client import MongoClientWrapper

    db = MongoClientWrapper("identity_service")
    users = db.collection("users")
    user = await users.find_one({"_id": user_id})
"""

import logging
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient

logger = logging.getLogger(__name__)


class MongoClientWrapper:
    """
    MongoDB client wrapper with service discovery integration.

    Wraps motor's AsyncIOMotorClient and provides:
    - Service discovery for host/port configuration
    - Environment variable fallbacks
    - Health check and shutdown helpers
    """

    def __init__(
        self,
        service_name: str,
        url: Optional[str] = None,
        database: Optional[str] = None,
        config=None,
    ):
        """
        Initialize MongoDB client wrapper.

        Args:
            service_name: Name of the service using this client
            url: Full MongoDB URI (defaults to config/service discovery)
            database: Database name (defaults to MONGODB_DATABASE)
            config: Optional ConfigManager instance
        """
        from core.config_manager import ConfigManager

        self.service_name = service_name
        config = config or ConfigManager(service_name)
        service_config = config.get_service_config()

        if url is None:
            infra = config.settings.infrastructure
            if infra.mongodb_url:
                url = infra.mongodb_url
            else:
                host, port = config.discover_service(
                    service_name="mongodb",
                    default_host=infra.mongodb_host,
                    default_port=infra.mongodb_port,
                    env_host_key="MONGODB_HOST",
                    env_port_key="MONGODB_PORT",
                )
                credentials = ""
                if infra.mongodb_username:
                    credentials = f"{infra.mongodb_username}:{infra.mongodb_password or ''}@"
                url = f"mongodb://{credentials}{host}:{port}"
            timeout_ms = infra.mongodb_server_selection_timeout_ms
        else:
            timeout_ms = 5000

        self.database_name = database or service_config.mongodb_database
        self.client = AsyncIOMotorClient(
            url,
            tz_aware=True,
            uuidRepresentation="standard",
            serverSelectionTimeoutMS=timeout_ms,
        )
        self.database = self.client[self.database_name]
        logger.info(f"MongoDB client for {service_name} using database '{self.database_name}'")

    def collection(self, name: str):
        """Get a collection of the service database"""
        return self.database[name]

    async def health_check(self) -> Dict[str, Any]:
        """Ping the server"""
        try:
            await self.database.command("ping")
            return {"status": "healthy", "database": "connected"}
        except Exception as e:
            logger.error(f"MongoDB health check failed for {self.service_name}: {e}")
            return {"status": "unhealthy", "database": "disconnected", "error": str(e)}

    def close(self):
        """Close the underlying client"""
        self.client.close()
        logger.debug(f"Closed MongoDB client for {self.service_name}")


def doc_to_model(doc: Dict[str, Any], model):
    """Convert a Mongo document to a pydantic model, mapping _id to id"""
    data = dict(doc)
    data["id"] = data.pop("_id")
    return model.model_validate(data)


def model_to_doc(entity) -> Dict[str, Any]:
    """Convert a pydantic model to a Mongo document, mapping id to _id"""
    data = entity.model_dump()
    data["_id"] = data.pop("id")
    return data


__all__ = ["MongoClientWrapper", "doc_to_model", "model_to_doc"]
