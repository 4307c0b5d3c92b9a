from fastapi import HTTPException, Request, status

from .files.manager import FileManager
from .files.types import ErrorKind, OperationResult

_ERROR_STATUS = {
    ErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.TRANSFORM_FAILURE: 422,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def get_file_manager(request: Request) -> FileManager:
    """FastAPI dependency returning the application's FileManager."""
    return request.app.state.file_manager


def ensure_success(result: OperationResult) -> OperationResult:
    """Turn a failed operation result into the matching HTTP error."""
    if result.success:
        return result
    raise HTTPException(
        status_code=_ERROR_STATUS.get(
            result.error, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        detail=result.message,
    )
