"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Client


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def find_client_by_email(db: Session, email: str) -> Optional[Client]:
        """Exact match on the normalized (lower-cased) email"""
        return db.query(Client).filter(Client.email == email).first()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def insert_client(db: Session, name: str, email: str, phone: Optional[str]) -> Client:
        """Insert a client and flush to obtain its id. The caller commits."""
        client = Client(name=name, email=email, phone=phone)
        db.add(client)
        db.flush()
        return client

    @staticmethod
    def update_client(db: Session, client: Client, name: str, phone: Optional[str]) -> Client:
        """Overwrite name and phone. The caller commits."""
        client.name = name
        client.phone = phone
        client.updated_at = func.now()
        db.flush()
        return client

    @staticmethod
    def search_clients(db: Session, search: Optional[str] = None) -> list[Client]:
        """Clients ordered by name, optionally filtered by name, email or phone"""
        query = db.query(Client)

        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    Client.name.ilike(search_term),
                    Client.email.ilike(search_term),
                    Client.phone.ilike(search_term),
                )
            )

        return query.order_by(Client.name.asc()).all()
