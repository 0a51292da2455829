from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text

from voice_api.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ApiKey(Base):
    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(128), unique=True, nullable=False, index=True)
    owner = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<ApiKey(id={self.id}, owner='{self.owner}', active={self.is_active})>"


class RequestLog(Base):
    """
    One row per successful classification request.

    api_key_id is a plain reference; the key row may be removed independently.
    """
    __tablename__ = "request_logs"

    id = Column(Integer, primary_key=True, index=True)
    api_key_id = Column(Integer, ForeignKey("api_keys.id"), nullable=True, index=True)
    language = Column(String(32), nullable=False)
    classification = Column(String(32), nullable=False)  # AI_GENERATED or HUMAN
    confidence_score = Column(Float, nullable=False)  # 0.0 to 1.0
    explanation = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    client_ip = Column(String(64), nullable=True)

    def __repr__(self):
        return f"<RequestLog(id={self.id}, classification='{self.classification}', score={self.confidence_score})>"
