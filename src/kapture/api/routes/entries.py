"""Capture and entry query routes."""
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from kapture.api.deps import get_services
from kapture.app import Services
from kapture.errors import CaptureError, InvalidPropertyData, PersistenceError
from kapture.models.entry import Entry, SyncStatus
from kapture.models.properties import PropertyValue
from kapture.sync.interfaces import Destination

router = APIRouter()


class CaptureRequest(BaseModel):
    destination_id: str
    destination_name: str
    properties: Dict[str, PropertyValue]


class EntryResponse(BaseModel):
    id: str
    destination_id: str
    destination_name: str
    properties: Optional[Dict[str, PropertyValue]]
    created_at: datetime
    synced_at: Optional[datetime]
    status: SyncStatus
    last_error: Optional[str]
    retry_count: int

    @classmethod
    def from_entry(cls, entry: Entry) -> "EntryResponse":
        try:
            properties = entry.decode_properties()
        except InvalidPropertyData:
            properties = None
        return cls(
            id=entry.id,
            destination_id=entry.destination_id,
            destination_name=entry.destination_name,
            properties=properties,
            created_at=entry.created_at,
            synced_at=entry.synced_at,
            status=entry.status,
            last_error=entry.last_error,
            retry_count=entry.retry_count,
        )


@router.post("/", response_model=EntryResponse, status_code=201)
async def capture_entry(
    request: CaptureRequest, services: Services = Depends(get_services)
):
    """
    Queue a captured entry. Returns as soon as it is stored locally;
    delivery to Notion happens in the background.
    """
    destination = Destination(id=request.destination_id, title=request.destination_name)
    try:
        entry = await services.capture.capture(destination, request.properties)
    except CaptureError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return EntryResponse.from_entry(entry)


@router.get("/", response_model=List[EntryResponse])
def list_entries(
    status: Optional[SyncStatus] = None,
    limit: int = 20,
    services: Services = Depends(get_services),
):
    """List entries, newest first."""
    return [
        EntryResponse.from_entry(e)
        for e in services.entries.list_recent(limit=limit, status=status)
    ]


@router.get("/{entry_id}", response_model=EntryResponse)
def get_entry(entry_id: str, services: Services = Depends(get_services)):
    entry = services.entries.get(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Entry not found")
    return EntryResponse.from_entry(entry)
