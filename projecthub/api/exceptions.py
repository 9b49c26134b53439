from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ProjectHubException(HTTPException):
    """Base class for errors the API reports to clients."""

    def __init__(
        self, status_code: int, detail: Any = None, headers: Optional[Dict[str, str]] = None
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ProjectNotFoundError(ProjectHubException):
    """Unknown project id"""

    def __init__(self, detail: str = "Project not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ProjectValidationError(ProjectHubException):
    """Request body failed validation"""

    def __init__(self, detail: str = "Validation error"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class StorageFailureError(ProjectHubException):
    """Storage call failed, including injected network failures"""

    def __init__(self, detail: str = "Internal Server Error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
