from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

UNKNOWN_YEAR = "unknown"


def normalize_year(value) -> Union[int, str]:
    """Coerce a year to int, falling back to "unknown" for anything unparseable"""
    if value is None or isinstance(value, bool):
        return UNKNOWN_YEAR
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    return UNKNOWN_YEAR


class UploadedPaper(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_id: str
    original_name: str = "unknown.pdf"
    subject: Optional[str] = "Unknown Subject"
    year: Union[int, str] = UNKNOWN_YEAR
    needs_ocr: bool = Field(False, alias="needsOCR")

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value):
        return normalize_year(value)


class ParsedPaper(BaseModel):
    text: str
    subject: Optional[str] = None
    year: Union[int, str] = UNKNOWN_YEAR
    original_name: str = "unknown.pdf"
    needs_ocr: bool = False

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value):
        return normalize_year(value)
