"""
Registry database models.

Table:
- vols: one row per registered volume, keyed by unique name
"""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class VolumeRow(Base):
    """
    Registered volume.
    Column names match registry files written by earlier releases.
    """
    __tablename__ = "vols"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True, index=True)
    name = Column(String, nullable=False, unique=True, index=True)
    obs_type = Column(String, nullable=False)
