from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

Language = Literal["Tamil", "English", "Hindi", "Malayalam", "Telugu"]
Classification = Literal["AI_GENERATED", "HUMAN"]


class DetectRequest(BaseModel):
    language: Language
    audioFormat: Literal["mp3"]
    audioBase64: str = Field(min_length=1)


class DetectResponse(BaseModel):
    status: Literal["success"] = "success"
    language: str
    classification: Classification
    confidenceScore: float = Field(ge=0.0, le=1.0)
    explanation: str


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str


class GenerateKeyRequest(BaseModel):
    owner: str


class _OrmModel(BaseModel):
    # read SQLAlchemy rows, emit camelCase
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class ApiKeyOut(_OrmModel):
    id: int
    key: str
    owner: str
    is_active: bool
    created_at: datetime


class RequestLogOut(_OrmModel):
    id: int
    api_key_id: Optional[int] = None
    language: str
    classification: str
    confidence_score: float
    explanation: Optional[str] = None
    timestamp: datetime
    client_ip: Optional[str] = None


class StatsResponse(_OrmModel):
    total_requests: int
    ai_detected: int
    human_detected: int
    recent_logs: List[RequestLogOut]
