"""
Common Pydantic schemas (messages, errors, countries, preferences).
"""

from pydantic import BaseModel, ConfigDict

from contactbook.core.preferences import Theme


class MessageResponse(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    detail: str
    errors: dict[str, str] | None = None


class CountryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    code: str
    dial_code: str
    flag: str


class ThemePreference(BaseModel):
    theme: Theme
