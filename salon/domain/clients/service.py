"""Client service - client registry keyed by email"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Client
from ...shared.validators import normalize_email
from ..scheduling.exceptions import NotFoundError, StoreError, ValidationError
from .repository import ClientRepository

logger = logging.getLogger(__name__)


class ClientRegistry:
    """
    Insert-or-update of contact records by email.

    ``upsert`` runs inside the caller's transaction and never commits, so the
    booking flow can write the client and the booking atomically.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def upsert(self, name: str, email: str, phone: Optional[str]) -> int:
        """
        Return the id of the client owning ``email``.

        An existing client gets its name and phone overwritten (last writer
        wins); otherwise a new client is inserted.
        """
        if not name or not name.strip():
            raise ValidationError("Client name is required")
        if not email or not email.strip():
            raise ValidationError("Client email is required")

        email = normalize_email(email)
        name = name.strip()

        client = self.repo.find_client_by_email(self.db, email)
        if client:
            self.repo.update_client(self.db, client, name=name, phone=phone)
            logger.info(f"👤 Updated existing client {client.id}")
            return client.id

        try:
            with self.db.begin_nested():
                client = self.repo.insert_client(self.db, name=name, email=email, phone=phone)
        except IntegrityError:
            # A concurrent request inserted the same email first
            client = self.repo.find_client_by_email(self.db, email)
            if client is None:
                raise
            logger.warning(f"⚠️ Concurrent insert for client {client.id}, updating instead")
            self.repo.update_client(self.db, client, name=name, phone=phone)
            return client.id

        logger.info(f"👤 Created client {client.id}")
        return client.id

    def get_client(self, client_id: int) -> Client:
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def search_clients(self, search: Optional[str] = None) -> list[Client]:
        try:
            return self.repo.search_clients(self.db, search)
        except SQLAlchemyError as e:
            logger.exception(f"❌ Failed to fetch clients: {e}")
            raise StoreError(str(e)) from e
