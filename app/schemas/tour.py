from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.property_tour import TourStatus
from app.schemas.property_search import PropertyResponse


class TourCreateRequest(BaseModel):
    property_id: UUID
    agent_id: UUID
    scheduled_date: datetime
    end_time: datetime
    notes: Optional[str] = Field(default=None, max_length=2000)

    class Config:
        json_schema_extra = {
            "example": {
                "property_id": "5b0f3c9e-8d2a-4c61-9f0e-1f1f3a9d2b11",
                "agent_id": "a3c1d7e2-4b5f-4e8a-9c0d-2e6f7a8b9c01",
                "scheduled_date": "2026-11-02T10:00:00Z",
                "end_time": "2026-11-02T11:00:00Z",
                "notes": "Interested in the garden",
            }
        }


class TourStatusUpdate(BaseModel):
    status: TourStatus


class TourResponse(BaseModel):
    id: UUID
    property_id: UUID
    user_id: UUID
    agent_id: UUID
    scheduled_date: datetime
    end_time: datetime
    status: TourStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TourRequesterSummary(BaseModel):
    id: UUID
    full_name: str
    email: str
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class TourWithPropertyResponse(TourResponse):
    # read from PropertyTour.listing, rendered as "property"
    listing: Optional[PropertyResponse] = Field(default=None, serialization_alias="property")


class AgentTourResponse(TourWithPropertyResponse):
    user: Optional[TourRequesterSummary] = None


class AvailabilityResponse(BaseModel):
    property_id: UUID
    start: datetime
    end: datetime
    available: bool
