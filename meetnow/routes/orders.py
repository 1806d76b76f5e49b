from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from meetnow.errors import NotAuthorizedError
from meetnow.models import ActivityType, Order, OrderType, ParticipantRole, participant_role
from meetnow.order_state import OrderStatus, allowed_transitions
from meetnow.routes.deps import get_services, get_viewer_id
from meetnow.services import Services
from meetnow.store import ALL_STATUSES

router = APIRouter(prefix="/orders", tags=["orders"])

STATUS_FILTER_PATTERN = "^(" + "|".join([ALL_STATUSES, *(s.value for s in OrderStatus)]) + ")$"


class CreateOrderBody(BaseModel):
    title: str = Field(..., min_length=1, description="Short headline of the meetup")
    description: str = Field(default="", description="What the meetup is about")
    scheduled_time: datetime | None = Field(default=None, description="When to meet (default: now)")
    location: str = Field(default="", description="Where to meet")
    amount: float = Field(default=0.0, ge=0, description="Offered amount")
    activity_type: ActivityType = Field(default=ActivityType.DINING)
    order_type: OrderType = Field(default=OrderType.SCHEDULED)


class UpdateStatusBody(BaseModel):
    status: OrderStatus = Field(..., description="Requested next status")


class RatingBody(BaseModel):
    stars: int = Field(..., description="1 to 5 stars")
    comment: str = Field(default="", description="Free-text review")


def order_payload(order: Order) -> dict:
    payload = order.model_dump(mode="json")
    payload["allowed_transitions"] = [s.value for s in allowed_transitions(order.status)]
    return payload


@router.post("")
async def create_order(
    body: CreateOrderBody,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> JSONResponse:
    order = services.store.create_order(creator_id=viewer_id, **body.model_dump())
    return JSONResponse(status_code=201, content=order_payload(order))


@router.get("")
async def list_orders(
    role: ParticipantRole = Query(..., description="creator: my posts; taker: my claims plus open orders"),
    status: str = Query(default=ALL_STATUSES, pattern=STATUS_FILTER_PATTERN),
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> list[dict]:
    status_filter = None if status == ALL_STATUSES else OrderStatus(status)
    return [order_payload(o) for o in services.store.list_orders(viewer_id, role, status_filter)]


@router.get("/{order_id}")
async def get_order(order_id: str, services: Services = Depends(get_services)) -> dict:
    return order_payload(services.store.get_order(order_id))


@router.post("/{order_id}/take")
async def take_order(
    order_id: str,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> dict:
    return order_payload(services.store.take_order(order_id, viewer_id))


@router.post("/{order_id}/status")
async def update_status(
    order_id: str,
    body: UpdateStatusBody,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> dict:
    if participant_role(services.store.get_order(order_id), viewer_id) is None:
        raise NotAuthorizedError(f"{viewer_id} is not a participant of order {order_id}")
    return order_payload(services.store.update_status(order_id, body.status))


@router.get("/{order_id}/ratings")
async def list_ratings(order_id: str, services: Services = Depends(get_services)) -> list[dict]:
    return [r.model_dump(mode="json") for r in services.ratings.ratings_for(order_id)]


@router.post("/{order_id}/ratings")
async def submit_rating(
    order_id: str,
    body: RatingBody,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> JSONResponse:
    rating = await services.ratings.submit(order_id, viewer_id, body.stars, body.comment)
    return JSONResponse(status_code=201, content=rating.model_dump(mode="json"))
