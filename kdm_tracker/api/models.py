"""
SQLAlchemy models for the persisted campaign.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text

from .database import Base


class CampaignRecord(Base):
    __tablename__ = "campaigns"

    key = Column(String(64), primary_key=True)  # storage key, "campaign" for the single document
    campaign = Column(Text, nullable=False)  # JSON string of the full campaign
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
