"""Service catalog repository - read-only access to salon services"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Service


class ServiceRepository:
    """Repository for service reference data"""

    @staticmethod
    def get_services(db: Session) -> list[Service]:
        """All services, cheapest first"""
        return db.query(Service).order_by(Service.price.asc(), Service.id.asc()).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_duration(db: Session, service_id: int) -> Optional[int]:
        """Duration in minutes, or None if the service does not exist"""
        row = db.query(Service.duration).filter(Service.id == service_id).first()
        return row[0] if row else None
