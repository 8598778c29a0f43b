"""Destination suggestion routes."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from kapture.api.deps import get_services
from kapture.app import Services
from kapture.sync.interfaces import Destination

router = APIRouter()


class DestinationResponse(BaseModel):
    id: str
    title: str
    url: Optional[str] = None

    @classmethod
    def from_destination(cls, d: Destination) -> "DestinationResponse":
        return cls(id=d.id, title=d.title, url=d.url)


@router.get("/", response_model=Optional[DestinationResponse])
async def suggest_destination(
    at: Optional[datetime] = None, services: Services = Depends(get_services)
):
    """Most likely destination for a capture at ``at`` (default: now)."""
    destination = await services.ranker.suggest(at)
    return DestinationResponse.from_destination(destination) if destination else None


@router.get("/recent", response_model=List[DestinationResponse])
async def recent_destinations(
    limit: int = 10, services: Services = Depends(get_services)
):
    return [
        DestinationResponse.from_destination(d)
        for d in await services.ranker.suggestions(limit=limit)
    ]
