from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class StateRecord(Base):
    """Serialized per-conversation state, one row per (conversation, kind)"""
    __tablename__ = "conversation_state"

    key = Column(String(255), primary_key=True)  # conversations/<id>/<kind>
    data = Column(Text, nullable=False)  # JSON document
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
