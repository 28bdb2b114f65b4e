"""
Data contracts shared by the proximity engine, the Gemini gateway and the UI.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ResourceType(str, Enum):
    SHELTER = 'SHELTER'
    WATER = 'WATER'
    MEDICAL = 'MEDICAL'
    DANGER = 'DANGER'


class ResourceStatus(str, Enum):
    OPERATIONAL = 'OPERATIONAL'
    CROWDED = 'CROWDED'
    CRITICAL = 'CRITICAL'
    UNKNOWN = 'UNKNOWN'


class Coordinate(BaseModel):
    """Latitude/longitude in degrees (WGS-84, no datum conversion)."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class ResourcePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: ResourceType
    status: ResourceStatus
    coordinate: Coordinate
    notes: str = ''
    last_updated: str = 'Just now'


class ParsedReport(BaseModel):
    """Structured output of the report extraction call.

    Also used as the response schema sent to Gemini, so the field
    descriptions below end up in the request.
    """

    name: str = Field(..., description="Name or approximate location of the place mentioned.")
    type: ResourceType = Field(..., description="The category of the resource.")
    status: ResourceStatus = Field(..., description="The operational status inferred from the text.")
    notes: str = Field(..., description="A brief summary of the situation.")


class GroundingLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    uri: str


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    role: Literal['user', 'model', 'system']
    text: str
    links: list[GroundingLink] = Field(default_factory=list)

    @model_validator(mode='after')
    def _system_has_no_links(self) -> ChatMessage:
        if self.role == 'system' and self.links:
            raise ValueError("system messages cannot carry links")
        return self
