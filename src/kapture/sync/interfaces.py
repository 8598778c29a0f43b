"""Contracts for the collaborators the sync core depends on but does not implement."""
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol

from kapture.models.properties import PropertyValue


@dataclass
class Destination:
    """A remote collection entries can be delivered into (a Notion database)."""

    id: str
    title: str
    url: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)  # property id → schema


@dataclass
class RemoteRecord:
    """A record as it exists on the remote side."""

    id: str
    url: Optional[str] = None
    last_edited_time: Optional[str] = None


class Authenticator(Protocol):
    def get_valid_token(self) -> str:
        """Return a bearer credential or raise NotAuthenticated."""
        ...


class RemoteAPI(Protocol):
    async def create_record(
        self, destination_id: str, properties: Mapping[str, PropertyValue]
    ) -> str:
        """Create a record and return its remote id, or raise RemoteError."""
        ...


class ConnectivityProbe(Protocol):
    async def is_reachable(self) -> bool:
        ...


class DestinationLookup(Protocol):
    async def get_destination(self, destination_id: str) -> Destination:
        """Resolve a destination or raise RemoteError."""
        ...
