"""FastAPI dependency exposing the process gateway to routers."""

from fastapi import Request

from church_social.realtime.gateway import Gateway


def get_gateway(request: Request) -> Gateway:
    """Return the gateway created at application start-up."""
    return request.app.state.gateway
