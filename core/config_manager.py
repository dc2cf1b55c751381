"""
Configuration Manager

Per-service configuration access built on top of core.config.

Usage:
    from core.config_manager import ConfigManager

    config_manager = ConfigManager("identity_service")
    config = config_manager.get_service_config()

    host, port = config_manager.discover_service(
        service_name='mongodb',
        default_host='localhost',
        default_port=27017,
        env_host_key='MONGODB_HOST',
        env_port_key='MONGODB_PORT'
    )
"""

import os
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Tuple, Any, Dict

from .config import get_settings, PlatformConfig, SERVICE_PORTS

logger = logging.getLogger(__name__)


@dataclass
class ServiceSettings:
    """Settings for a single running service"""
    service_name: str
    service_host: str = "0.0.0.0"
    service_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"
    consul_enabled: bool = False
    consul_host: str = "localhost"
    consul_port: int = 8500
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "platform"


class ConfigManager:
    """Configuration manager for one service"""

    def __init__(self, service_name: str, settings: Optional[PlatformConfig] = None):
        self.service_name = service_name
        self.settings = settings or get_settings()
        self._service_config: Optional[ServiceSettings] = None
        self._consul_registry = None

    def get_service_config(self) -> ServiceSettings:
        """Build (once) the settings for this service"""
        if self._service_config is None:
            env_prefix = self.service_name.upper()
            infra = self.settings.infrastructure
            default_port = SERVICE_PORTS.get(self.service_name, 8000)

            port_raw = os.getenv(f"{env_prefix}_PORT") or os.getenv("SERVICE_PORT")
            try:
                service_port = int(port_raw) if port_raw else default_port
            except ValueError:
                logger.warning(f"Invalid port '{port_raw}' for {self.service_name}, using {default_port}")
                service_port = default_port

            self._service_config = ServiceSettings(
                service_name=self.service_name,
                service_host=os.getenv(f"{env_prefix}_HOST", os.getenv("SERVICE_HOST", "0.0.0.0")),
                service_port=service_port,
                debug=self.settings.debug,
                log_level=self.settings.logging.log_level,
                environment=self.settings.environment,
                consul_enabled=infra.consul_enabled,
                consul_host=infra.consul_host,
                consul_port=infra.consul_port,
                mongodb_uri=infra.mongodb_uri,
                mongodb_database=os.getenv(f"{env_prefix}_MONGODB_DATABASE", infra.mongodb_database),
            )
        return self._service_config

    def get(self, key: str, default: Any = None) -> Any:
        """Get a raw config value from the environment"""
        return os.getenv(key, default)

    def _get_consul_registry(self):
        if self._consul_registry is None:
            from .consul_registry import ConsulRegistry
            infra = self.settings.infrastructure
            self._consul_registry = ConsulRegistry(
                service_name=self.service_name,
                consul_host=infra.consul_host,
                consul_port=infra.consul_port,
            )
        return self._consul_registry

    def discover_service(
        self,
        service_name: str,
        default_host: str,
        default_port: int,
        env_host_key: Optional[str] = None,
        env_port_key: Optional[str] = None
    ) -> Tuple[str, int]:
        """
        Resolve host and port of a dependency

        Priority: environment variables → Consul → defaults

        Returns:
            Tuple of (host, port)
        """
        env_host = os.getenv(env_host_key) if env_host_key else None
        env_port = os.getenv(env_port_key) if env_port_key else None
        if env_host:
            try:
                port = int(env_port) if env_port else default_port
            except ValueError:
                port = default_port
            logger.debug(f"Resolved {service_name} from environment: {env_host}:{port}")
            return env_host, port

        if self.settings.infrastructure.consul_enabled:
            try:
                instances = self._get_consul_registry().discover_service(service_name)
                if instances:
                    instance = instances[0]
                    logger.debug(f"Resolved {service_name} from Consul: {instance['address']}:{instance['port']}")
                    return instance['address'], int(instance['port'])
            except Exception as e:
                logger.warning(f"Consul discovery failed for {service_name}: {e}")

        return default_host, default_port

    def print_config_summary(self, show_secrets: bool = False) -> Dict[str, Any]:
        """Log the effective service configuration"""
        summary = asdict(self.get_service_config())
        if not show_secrets and "@" in summary["mongodb_uri"]:
            scheme, rest = summary["mongodb_uri"].split("://", 1)
            summary["mongodb_uri"] = f"{scheme}://***@{rest.split('@', 1)[1]}"

        logger.info(f"Configuration for {self.service_name}:")
        for key, value in summary.items():
            logger.info(f"  {key}: {value}")
        return summary


__all__ = ["ConfigManager", "ServiceSettings"]
