from sqlalchemy import Column, String, Integer, Text
from .db import Base

class CacheEntry(Base):
    __tablename__ = "cache"
    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)           # JSON-encoded
    expires_at = Column(Integer, nullable=True)    # unix ts, NULL = never
