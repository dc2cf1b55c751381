#!/usr/bin/env python3
"""Platform main configuration

Combines all sub-configs for the identity, CMS kit and docs services.
"""
import os
from dataclasses import dataclass, field

from .infra_config import InfraConfig
from .logging_config import LoggingConfig
from .service_config import ServiceConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class PlatformConfig:
    """Top-level platform configuration"""
    environment: str = "development"
    debug: bool = False

    infrastructure: InfraConfig = field(default_factory=InfraConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    services: ServiceConfig = field(default_factory=ServiceConfig)

    @classmethod
    def from_env(cls) -> 'PlatformConfig':
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "false")),
            infrastructure=InfraConfig.from_env(),
            logging=LoggingConfig.from_env(),
            services=ServiceConfig.from_env(),
        )
