"""Catalog service - service listing for the public booking form"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Service
from ..scheduling.exceptions import StoreError
from .repository import ServiceRepository

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def get_services(self) -> list[Service]:
        try:
            return self.repo.get_services(self.db)
        except SQLAlchemyError as e:
            logger.exception(f"❌ Failed to fetch services: {e}")
            raise StoreError(str(e)) from e
