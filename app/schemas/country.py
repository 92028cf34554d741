"""
Pydantic schemas for country selection.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List


class CountrySelectRequest(BaseModel):
    country_code: str = Field(..., min_length=2, max_length=2, examples=["JM"])

    @field_validator("country_code")
    @classmethod
    def normalize(cls, v):
        return v.strip().upper()


class CountryResponse(BaseModel):
    country_code: str
    name: str
    currency: str
    symbol: str
    supported_countries: List[str]
