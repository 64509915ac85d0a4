"""
Repository layer for zones and driver documents.
Callers depend on ZoneDriverRepository; DatabaseRepository backs it with SQLModel.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Protocol

from sqlmodel import Field, Session, SQLModel, create_engine, select

from .models import Zone
from .schemas import AppConfig


logger = logging.getLogger(__name__)


class ZoneRecord(SQLModel, table=True):
    """Speed-limit zone owned by a branch."""
    id: Optional[int] = Field(default=None, primary_key=True)
    branch_id: str = Field(index=True)
    category: str = Field(default="Slowdown")
    lat: Optional[float] = Field(default=None)
    lng: Optional[float] = Field(default=None)
    radius_m: Optional[float] = Field(default=None)
    speed_limit_kmh: Optional[float] = Field(default=None)

    def to_zone(self) -> Zone:
        return Zone.from_record({
            "category": self.category,
            "location": {"lat": self.lat, "lng": self.lng},
            "radius": self.radius_m,
            "speedLimit": self.speed_limit_kmh,
        })


class DriverDocument(SQLModel, table=True):
    """Driver document stored verbatim so every historical shape survives."""
    id: str = Field(primary_key=True)
    branch_id: Optional[str] = Field(default=None, index=True)
    payload: str = Field(default="{}")  # JSON


class ZoneDriverRepository(Protocol):
    """Narrow persistence interface consumed by the service layer."""

    def get_zones_for_branch(self, branch_id: str) -> List[Zone]:
        ...

    def get_driver_by_id(self, driver_id: str) -> Optional[Dict[str, Any]]:
        ...


class DatabaseRepository:
    """SQLModel implementation of ZoneDriverRepository."""

    def __init__(self, config: AppConfig):
        """Initialize database connection."""
        self.config = config
        self.engine = create_engine(
            config.database.url,
            echo=config.database.echo
        )

    def create_tables(self) -> None:
        """Create all database tables."""
        SQLModel.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get database session."""
        return Session(self.engine)

    # Zone operations
    def get_zones_for_branch(self, branch_id: str) -> List[Zone]:
        """All zones for a branch as core Zone values."""
        with self.get_session() as session:
            rows = session.exec(
                select(ZoneRecord).where(ZoneRecord.branch_id == branch_id)
            ).all()
            return [row.to_zone() for row in rows]

    def upsert_zone(self, branch_id: str, zone: Zone, zone_id: Optional[int] = None) -> int:
        """Insert or replace a zone, returning its id."""
        with self.get_session() as session:
            row = session.get(ZoneRecord, zone_id) if zone_id is not None else None
            if row is None:
                row = ZoneRecord(branch_id=branch_id)
            row.branch_id = branch_id
            row.category = getattr(zone.category, "value", zone.category)
            row.lat = zone.location.latitude if zone.location else None
            row.lng = zone.location.longitude if zone.location else None
            row.radius_m = zone.radius_meters
            row.speed_limit_kmh = zone.speed_limit_kmh
            session.add(row)
            session.commit()
            session.refresh(row)
            return row.id

    # Driver operations
    def get_driver_by_id(self, driver_id: str) -> Optional[Dict[str, Any]]:
        """Raw driver document, or None if unknown."""
        with self.get_session() as session:
            row = session.get(DriverDocument, driver_id)
            if row is None:
                return None
            doc = json.loads(row.payload or "{}")
            doc.setdefault("id", row.id)
            return doc

    def upsert_driver(self, driver_id: str, document: Dict[str, Any], branch_id: Optional[str] = None) -> None:
        """Store a driver document as-is."""
        with self.get_session() as session:
            row = session.get(DriverDocument, driver_id)
            if row is None:
                row = DriverDocument(id=driver_id)
            row.branch_id = branch_id
            row.payload = json.dumps(document)
            session.add(row)
            session.commit()
        logger.debug(f"Stored driver {driver_id}")
