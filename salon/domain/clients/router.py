"""Client router - back office client list"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from .schemas import ClientResponse
from .service import ClientRegistry

router = APIRouter(prefix="/admin/clients", tags=["Clients"], dependencies=[Depends(get_current_admin)])


def get_client_registry(db: Session = Depends(get_db)) -> ClientRegistry:
    """Dependency injection for ClientRegistry"""
    return ClientRegistry(db)


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    search: Optional[str] = Query(None, description="Match on name, email or phone"),
    registry: ClientRegistry = Depends(get_client_registry),
):
    """All clients ordered by name"""
    return registry.search_clients(search)
