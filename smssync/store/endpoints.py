"""Sources of configured sync endpoints."""

from abc import ABC, abstractmethod

from ..models import EndpointStatus, SyncEndpoint


class EndpointSource(ABC):
    """Supplies the sync endpoints for a sync pass."""

    @abstractmethod
    def get(self, status: EndpointStatus) -> list[SyncEndpoint]:
        """Get endpoints with the given status, in configured order."""
        pass


class StaticEndpointSource(EndpointSource):
    """Endpoints fixed at construction, typically read from the config file."""

    def __init__(self, endpoints: list[SyncEndpoint]):
        self._endpoints = list(endpoints)

    def get(self, status: EndpointStatus) -> list[SyncEndpoint]:
        return [e for e in self._endpoints if e.status == status]
