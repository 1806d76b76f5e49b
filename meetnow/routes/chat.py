from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from meetnow.chat import ChatMessage
from meetnow.errors import SendFailedError
from meetnow.routes.deps import get_services, get_viewer_id
from meetnow.services import Services

router = APIRouter(prefix="/orders/{order_id}", tags=["chat"])


class SendMessageBody(BaseModel):
    content: str = Field(..., description="Message text")


class InitiateConfirmationBody(BaseModel):
    counterpart_id: str | None = Field(
        default=None,
        description="Candidate to confirm with; required when the creator initiates",
    )


def _delivery_payload(services: Services, message: ChatMessage, viewer_id: str) -> dict:
    payload = services.chat.render(message, viewer_id).model_dump(mode="json")
    payload["retries_left"] = services.sender.retries_left(message)
    return payload


def _send_failed(services: Services, message: ChatMessage, viewer_id: str, exc: SendFailedError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": type(exc).__name__,
            "detail": exc.detail,
            "permanent": exc.permanent,
            "message": _delivery_payload(services, message, viewer_id),
        },
    )


@router.get("/messages")
async def list_messages(
    order_id: str,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> list[dict]:
    return [
        services.chat.render(m, viewer_id).model_dump(mode="json")
        for m in services.chat.messages(order_id)
    ]


@router.post("/messages")
async def send_message(
    order_id: str,
    body: SendMessageBody,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> JSONResponse:
    message = services.chat.post_text(order_id, viewer_id, body.content)
    try:
        await services.sender.send(message)
    except SendFailedError as e:
        return _send_failed(services, message, viewer_id, e)
    return JSONResponse(status_code=201, content=_delivery_payload(services, message, viewer_id))


@router.post("/messages/{message_id}/retry")
async def retry_message(
    order_id: str,
    message_id: str,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> JSONResponse:
    message = services.chat.get_message(order_id, message_id)
    try:
        await services.sender.retry(message)
    except SendFailedError as e:
        return _send_failed(services, message, viewer_id, e)
    return JSONResponse(status_code=200, content=_delivery_payload(services, message, viewer_id))


def _handshake_payload(services: Services, order_id: str) -> dict:
    handshake = services.confirmation.current(order_id)
    return {
        "order_id": order_id,
        "state": services.confirmation.state(order_id).value,
        "initiator_id": handshake.initiator_id if handshake else None,
        "initiator_role": handshake.initiator_role.value if handshake else None,
        "counterpart_id": handshake.counterpart_id if handshake else None,
        "rejections": services.confirmation.rejections(order_id),
    }


@router.get("/confirmation")
async def get_confirmation(order_id: str, services: Services = Depends(get_services)) -> dict:
    services.store.get_order(order_id)
    return _handshake_payload(services, order_id)


@router.post("/confirmation")
async def initiate_confirmation(
    order_id: str,
    body: InitiateConfirmationBody,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> JSONResponse:
    services.confirmation.initiate(order_id, viewer_id, body.counterpart_id)
    return JSONResponse(status_code=201, content=_handshake_payload(services, order_id))


@router.post("/confirmation/accept")
async def accept_confirmation(
    order_id: str,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> dict:
    order = services.confirmation.accept(order_id, viewer_id)
    return {"confirmation": _handshake_payload(services, order_id), "order": order.model_dump(mode="json")}


@router.post("/confirmation/reject")
async def reject_confirmation(
    order_id: str,
    viewer_id: str = Depends(get_viewer_id),
    services: Services = Depends(get_services),
) -> dict:
    handshake = services.confirmation.reject(order_id, viewer_id)
    payload = _handshake_payload(services, order_id)
    payload["last_outcome"] = handshake.state.value
    return payload
