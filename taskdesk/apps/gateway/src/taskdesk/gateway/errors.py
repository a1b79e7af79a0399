"""统一错误响应 -- {"error": {"code", "message"}}

领域异常在此映射为 HTTP 状态码：
    TaskPermissionError     -> 403
    TaskValidationError     -> 422
    TaskNotFoundError       -> 404
    EmployeeNotFoundError   -> 404
    DuplicateEmployeeError  -> 409
    StorageError            -> 503
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from taskdesk.core.exceptions import (
    DuplicateEmployeeError,
    EmployeeNotFoundError,
    StorageError,
    TaskDeskError,
    TaskNotFoundError,
    TaskPermissionError,
    TaskValidationError,
)

log = structlog.get_logger()

_STATUS_CODES: dict[type[TaskDeskError], int] = {
    TaskPermissionError: 403,
    TaskValidationError: 422,
    TaskNotFoundError: 404,
    EmployeeNotFoundError: 404,
    DuplicateEmployeeError: 409,
    StorageError: 503,
}


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def _status_for(exc: TaskDeskError) -> int:
    for exc_type, status_code in _STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def taskdesk_error_handler(request: Request, exc: TaskDeskError) -> JSONResponse:
    status_code = _status_for(exc)
    await log.ainfo(
        "request_rejected",
        code=exc.code,
        status_code=status_code,
        error=exc.message,
    )
    if isinstance(exc, StorageError):
        # 不向客户端暴露底层异常细节
        return error_response(status_code, exc.code, "Storage is temporarily unavailable")
    return error_response(status_code, exc.code, exc.message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return error_response(422, TaskValidationError.code, message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskDeskError, taskdesk_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
