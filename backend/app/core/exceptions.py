from fastapi import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
)


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Invalid request", status_code: int = HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Unauthorized", status_code: int = HTTP_401_UNAUTHORIZED):
        super().__init__(status_code=status_code, detail=detail)


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "Forbidden", status_code: int = HTTP_403_FORBIDDEN):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found", status_code: int = HTTP_404_NOT_FOUND):
        super().__init__(status_code=status_code, detail=detail)
