from fastapi import Header, Request

from meetnow.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_viewer_id(
    x_user_id: str = Header(..., min_length=1, description="Identity of the current viewer"),
) -> str:
    return x_user_id
