from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Service(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1, description="Stable slug, e.g. 'swedish'")
    name: str
    duration: str = Field(..., description="Free text, e.g. '60 min'")
    price: str = Field(..., description="Free text, e.g. '$85'")
    icon: str = ""
    description: str = ""
    benefits: List[str] = []


class ServiceUpsert(BaseModel):
    """Full or partial service payload; only the id is required."""

    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    benefits: Optional[List[str]] = None
