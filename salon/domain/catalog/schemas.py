"""Catalog schemas"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ServiceResponse(BaseModel):
    """Schema for a bookable salon service"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    duration: int
    price: Decimal
