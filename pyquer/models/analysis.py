from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pyquer.errors import InvalidProviderError
from pyquer.models.paper import UploadedPaper


class Provider(str, Enum):
    GEMINI = "gemini"
    MISTRAL = "mistral"
    COHERE = "cohere"

    @classmethod
    def parse(cls, value) -> "Provider":
        """Resolve a selector string (case-insensitive) to a provider"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidProviderError(value)


class AnalysisRequest(BaseModel):
    papers: List[UploadedPaper] = Field(default_factory=list)
    provider: str = Provider.GEMINI.value


class ProviderAnalysisRequest(BaseModel):
    papers: List[UploadedPaper] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    analysis: str
    provider_used: Provider
    timestamp: datetime
    prompt: str
    papers_text: str


class AnalysisHistoryRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[int] = None
    user_id: int
    papers_info: List[dict] = Field(default_factory=list)
    prompt: str
    papers_text: Optional[str] = None
    analysis: str
    model_used: Provider
    created_at: Optional[datetime] = None
