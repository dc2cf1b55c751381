"""
Consul Service Discovery

Looks up healthy instances of the platform services. Registration belongs
to the Consul agent sidecar, so register/deregister only log.
"""

import consul
import logging
import os
import random
import socket
from typing import Optional, List, Dict, Any

logger = logging.getLogger(__name__)


class ConsulRegistry:
    """Consul discovery client for one service"""

    def __init__(
        self,
        service_name: Optional[str] = None,
        service_port: Optional[int] = None,
        consul_host: str = "localhost",
        consul_port: int = 8500,
        tags: Optional[List[str]] = None,
        meta: Optional[Dict[str, str]] = None,
    ):
        self.consul = consul.Consul(host=consul_host, port=consul_port)
        self.service_name = service_name
        self.service_port = service_port
        self.tags = tags or []
        self.meta = meta or {}

        host = os.getenv('HOSTNAME', socket.gethostname())
        if service_name and service_port:
            self.service_id = f"{service_name}-{host}-{service_port}"
        else:
            self.service_id = "discovery-client"

        logger.info(f"Consul discovery for {self.service_id} via {consul_host}:{consul_port}")

    def register(self) -> bool:
        logger.debug(f"{self.service_id}: registration left to the Consul agent")
        return True

    def deregister(self) -> bool:
        logger.debug(f"{self.service_id}: deregistration left to the Consul agent")
        return True

    def discover_service(self, service_name: str) -> List[Dict[str, Any]]:
        """Instances of service_name passing their health checks"""
        try:
            _, entries = self.consul.health.service(service_name, passing=True)
        except Exception as e:
            logger.error(f"Consul lookup of {service_name} failed: {e}")
            return []

        return [
            {
                'id': entry['Service']['ID'],
                'address': entry['Service']['Address'],
                'port': entry['Service']['Port'],
                'tags': entry['Service'].get('Tags', []),
                'meta': entry['Service'].get('Meta', {}),
            }
            for entry in entries
        ]

    def get_service_endpoint(self, service_name: str) -> Optional[str]:
        """URL of one healthy instance; instances tagged 'preferred' win"""
        instances = self.discover_service(service_name)
        if not instances:
            return None

        preferred = [i for i in instances if 'preferred' in i['tags']]
        chosen = random.choice(preferred or instances)
        return f"http://{chosen['address']}:{chosen['port']}"


__all__ = ["ConsulRegistry"]
