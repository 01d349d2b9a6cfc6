from sqlalchemy import Column, Integer, String
from ..db.session import Base
class City(Base):
    __tablename__ = "cities"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    state = Column(String, nullable=False)
    latitude = Column(String, nullable=False)
    longitude = Column(String, nullable=False)
    # informational only; live counts come from the devices table
    device_count = Column(Integer, default=0)
