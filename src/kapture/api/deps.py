"""Request dependencies."""
from fastapi import Request

from kapture.app import Services


def get_services(request: Request) -> Services:
    return request.app.state.services
