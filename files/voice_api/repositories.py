import logging
import secrets
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from voice_api.models import ApiKey, RequestLog
from voice_api.model.model import AI_LABEL, HUMAN_LABEL

logger = logging.getLogger(__name__)


class ApiKeyRepository:
    def __init__(self, db: Session, key_prefix: str = "sk_live_"):
        self.db = db
        self.key_prefix = key_prefix

    def get(self, key: str) -> Optional[ApiKey]:
        return self.db.query(ApiKey).filter(ApiKey.key == key).first()

    def create(self, owner: str, key: Optional[str] = None) -> ApiKey:
        api_key = ApiKey(
            key=key or f"{self.key_prefix}{secrets.token_hex(16)}",
            owner=owner,
            is_active=True,
        )
        self.db.add(api_key)
        self.db.commit()
        self.db.refresh(api_key)
        return api_key


class RequestLogRepository:
    def __init__(self, db: Session):
        self.db = db

    def insert(self, log: RequestLog) -> RequestLog:
        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)
        return log

    def recent(self, n: int = 10) -> List[RequestLog]:
        return (
            self.db.query(RequestLog)
            .order_by(RequestLog.timestamp.desc(), RequestLog.id.desc())
            .limit(n)
            .all()
        )

    def counts_by_classification(self) -> Dict[str, int]:
        rows = (
            self.db.query(RequestLog.classification, func.count(RequestLog.id))
            .group_by(RequestLog.classification)
            .all()
        )
        counts = {AI_LABEL: 0, HUMAN_LABEL: 0}
        counts.update({classification: count for classification, count in rows})
        return counts

    def stats(self, recent_limit: int = 10) -> dict:
        counts = self.counts_by_classification()
        return {
            "totalRequests": sum(counts.values()),
            "aiDetected": counts[AI_LABEL],
            "humanDetected": counts[HUMAN_LABEL],
            "recentLogs": self.recent(recent_limit),
        }


def ensure_seed_key(repo: ApiKeyRepository, key: str, owner: str) -> ApiKey:
    """Insert the demo key unless it is already present. Called once at startup."""
    existing = repo.get(key)
    if existing is not None:
        return existing
    api_key = repo.create(owner, key=key)
    logger.info("Seeded demo API key: %s...", key[:8])
    return api_key
