"""
FastAPI dependency functions
"""
from fastapi import Request

from projecthub.api.services.storage import ProjectStorage


def get_storage(request: Request) -> ProjectStorage:
    """Storage instance attached to the application by create_app."""
    return request.app.state.storage
