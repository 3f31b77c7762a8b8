"""Professor model definitions."""

from sqlalchemy import JSON, Column, Integer, String
from backend.database import Base


class Professor(Base):
    """Represents a rated professor."""
    __tablename__ = "professors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    faculty = Column(String)
    title = Column(String)
    image_url = Column(String)
    undergraduate_courses = Column(JSON, default=list)
    graduate_courses = Column(JSON, default=list)
