"""FastAPI dependencies for reaching application-owned components."""

from fastapi import Request

from uniagent.broker.service import Broker
from uniagent.config import Settings


def get_broker(request: Request) -> Broker:
    """Get the broker created for this application."""
    return request.app.state.broker


def get_app_settings(request: Request) -> Settings:
    """Get the settings this application was created with."""
    return request.app.state.settings
