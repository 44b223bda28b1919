from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter

from app.config import settings
from app.dependencies.auth import get_current_user_id
from app.dependencies.services import get_tour_service
from app.schemas.tour import (
    AgentTourResponse,
    AvailabilityResponse,
    TourCreateRequest,
    TourResponse,
    TourStatusUpdate,
    TourWithPropertyResponse,
)
from app.services.availability import as_utc
from app.services.tours import TourService

router = APIRouter(prefix="/api/v1/property-tours", tags=["property-tours"])

_booking_limiter = RateLimiter(
    times=settings.BOOKING_RATE_LIMIT_TIMES,
    seconds=settings.BOOKING_RATE_LIMIT_SECONDS,
)


async def booking_rate_limit(request: Request, response: Response):
    # Limiting is only active when Redis was reachable at startup
    if FastAPILimiter.redis is None:
        return
    await _booking_limiter(request, response)


@router.get("/availability/{property_id}", response_model=AvailabilityResponse)
async def check_availability(
    property_id: UUID,
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: TourService = Depends(get_tour_service),
):
    available = await service.check_availability(property_id, start, end)
    return AvailabilityResponse(property_id=property_id, start=as_utc(start), end=as_utc(end), available=available)


@router.post("", response_model=TourResponse, status_code=201, dependencies=[Depends(booking_rate_limit)])
async def create_tour(
    request: TourCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: TourService = Depends(get_tour_service),
):
    return await service.create_tour(
        property_id=request.property_id,
        user_id=user_id,
        agent_id=request.agent_id,
        start=request.scheduled_date,
        end=request.end_time,
        notes=request.notes,
    )


@router.patch("/{tour_id}/status", response_model=TourResponse)
async def update_tour_status(
    tour_id: UUID,
    request: TourStatusUpdate,
    user_id: UUID = Depends(get_current_user_id),
    service: TourService = Depends(get_tour_service),
):
    return await service.update_tour_status(tour_id, request.status, user_id)


@router.delete("/{tour_id}", response_model=TourResponse)
async def cancel_tour(
    tour_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: TourService = Depends(get_tour_service),
):
    return await service.cancel_tour(tour_id, user_id)


@router.get("/user/{target_user_id}", response_model=List[TourWithPropertyResponse])
async def list_user_tours(
    target_user_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: TourService = Depends(get_tour_service),
):
    return await service.list_tours_for_user(target_user_id, user_id)


@router.get("/agent/{agent_id}", response_model=List[AgentTourResponse])
async def list_agent_tours(
    agent_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: TourService = Depends(get_tour_service),
):
    return await service.list_tours_for_agent(agent_id, user_id)


@router.get("/property/{property_id}", response_model=List[TourResponse])
async def list_property_tours(
    property_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: TourService = Depends(get_tour_service),
):
    return await service.list_tours_for_property(property_id, user_id)


@router.get("/{tour_id}", response_model=TourResponse)
async def get_tour(
    tour_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: TourService = Depends(get_tour_service),
):
    return await service.get_tour(tour_id, user_id)
