"""Destination listing and favorite routes."""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from kapture.api.deps import get_services
from kapture.app import Services
from kapture.errors import NotAuthenticated, PersistenceError, RemoteError
from kapture.models.properties import PropertyKind
from kapture.sync.interfaces import Destination

router = APIRouter()


class PropertyResponse(BaseModel):
    id: str
    name: str
    kind: PropertyKind
    editable: bool

    @classmethod
    def from_schema(cls, name: str, schema: Dict[str, Any]) -> "PropertyResponse":
        kind = PropertyKind.parse(schema.get("type", ""))
        return cls(
            id=schema.get("id", name),
            name=name,
            kind=kind,
            editable=kind.is_editable,
        )


class DestinationDetail(BaseModel):
    id: str
    title: str
    url: Optional[str] = None
    is_favorite: bool
    properties: List[PropertyResponse]


class FavoriteResponse(BaseModel):
    destination_id: str
    is_favorite: bool


@router.get("/", response_model=List[DestinationDetail])
async def list_destinations(
    q: Optional[str] = None,
    refresh: bool = False,
    services: Services = Depends(get_services),
):
    """
    Databases shared with the integration, served from the directory cache
    unless ``refresh`` is set. ``q`` filters titles case-insensitively.
    """
    try:
        destinations = await services.directory.list_destinations(force_refresh=refresh)
    except NotAuthenticated as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except RemoteError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    if q:
        destinations = [d for d in destinations if q.lower() in d.title.lower()]
    favorites = {p.destination_id for p in services.preferences.favorites()}
    return [_detail(d, d.id in favorites) for d in destinations]


@router.get("/favorites", response_model=List[DestinationDetail])
async def favorite_destinations(services: Services = Depends(get_services)):
    return [_detail(d, True) for d in await services.ranker.favorites()]


@router.post("/{destination_id}/favorite", response_model=FavoriteResponse)
def toggle_favorite(destination_id: str, services: Services = Depends(get_services)):
    try:
        pref = services.preferences.toggle_favorite(destination_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return FavoriteResponse(destination_id=pref.destination_id, is_favorite=pref.is_favorite)


def _detail(destination: Destination, is_favorite: bool) -> DestinationDetail:
    return DestinationDetail(
        id=destination.id,
        title=destination.title,
        url=destination.url,
        is_favorite=is_favorite,
        properties=[
            PropertyResponse.from_schema(name, schema)
            for name, schema in destination.properties.items()
        ],
    )
