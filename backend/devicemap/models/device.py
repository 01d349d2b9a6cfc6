from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from ..db.session import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Device(Base):
    __tablename__ = "devices"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    device_id = Column(String, nullable=False, unique=True)
    type = Column(String, nullable=False)
    status = Column(String, nullable=False)
    # no foreign key: orphan city references are accepted and reported as "Unknown City"
    city_id = Column(Integer, index=True, nullable=False)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    metadata_ = Column("metadata", Text, nullable=False)
