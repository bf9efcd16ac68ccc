"""Watson Discovery bindings."""

from watson_client.discovery.v1 import DiscoveryV1

__all__ = ["DiscoveryV1"]
