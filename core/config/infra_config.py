#!/usr/bin/env python3
"""Infrastructure services configuration

MongoDB document store and Consul service discovery endpoints.
"""
import os
from dataclasses import dataclass
from typing import Optional

def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class InfraConfig:
    """Infrastructure service endpoints"""

    # ===========================================
    # MongoDB (motor - port 27017)
    # ===========================================
    mongodb_host: str = "localhost"
    mongodb_port: int = 27017
    mongodb_database: str = "platform"
    mongodb_username: Optional[str] = None
    mongodb_password: Optional[str] = None
    mongodb_url: Optional[str] = None
    mongodb_server_selection_timeout_ms: int = 5000

    # ===========================================
    # Consul (service discovery - port 8500)
    # ===========================================
    consul_enabled: bool = False
    consul_host: str = "localhost"
    consul_port: int = 8500

    @property
    def mongodb_uri(self) -> str:
        """Connection URI, explicit MONGODB_URL wins"""
        if self.mongodb_url:
            return self.mongodb_url
        if self.mongodb_username:
            return (
                f"mongodb://{self.mongodb_username}:{self.mongodb_password or ''}"
                f"@{self.mongodb_host}:{self.mongodb_port}"
            )
        return f"mongodb://{self.mongodb_host}:{self.mongodb_port}"

    @classmethod
    def from_env(cls) -> 'InfraConfig':
        """Load infrastructure config from environment"""
        return cls(
            # MongoDB
            mongodb_host=os.getenv("MONGODB_HOST", "localhost"),
            mongodb_port=_int(os.getenv("MONGODB_PORT", "27017"), 27017),
            mongodb_database=os.getenv("MONGODB_DATABASE", "platform"),
            mongodb_username=os.getenv("MONGODB_USERNAME"),
            mongodb_password=os.getenv("MONGODB_PASSWORD"),
            mongodb_url=os.getenv("MONGODB_URL"),
            mongodb_server_selection_timeout_ms=_int(
                os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "5000"), 5000
            ),

            # Consul
            consul_enabled=_bool(os.getenv("CONSUL_ENABLED", "false")),
            consul_host=os.getenv("CONSUL_HOST", "localhost"),
            consul_port=_int(os.getenv("CONSUL_PORT", "8500"), 8500),
        )
