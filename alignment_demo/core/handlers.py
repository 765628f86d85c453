import logging
from typing import Union, Awaitable, Optional, Any, Dict, Type, List

from fastapi import Request, FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from starlette.status import (
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_422_UNPROCESSABLE_ENTITY,
)

from alignment_demo.core.errors import BaseError, ExceptionData
from alignment_demo.core.responses import ErrorResponse

logger = logging.getLogger(__name__)


def get_responses_for_exceptions(
    *exceptions: Type[BaseError],
    with_internal_error: bool = True,
    with_validation_error: bool = False,
) -> Dict[Union[int, str], Dict[str, Any]]:
    responses = {}

    # Group exceptions by status_code
    status_groups: Dict[int, List[str]] = {}

    for exc_class in exceptions:
        status_groups.setdefault(exc_class.status_code, []).append(exc_class.code)

    if with_internal_error:
        status_groups[HTTP_500_INTERNAL_SERVER_ERROR] = ["internal_server_error"]

    if with_validation_error:
        status_groups.setdefault(HTTP_422_UNPROCESSABLE_ENTITY, []).append(
            "validation_error"
        )

    for status_code, codes in status_groups.items():
        if len(codes) == 1:
            description = f"Code: {codes[0]}"
        else:
            description = f"Possible errors: {', '.join(codes)}"

        responses[status_code] = {"model": ErrorResponse, "description": description}

    return responses


def core_register_api_handlers(app: FastAPI, debug: bool = False):
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> Union[JSONResponse, Awaitable[JSONResponse]]:
        exception_data = ExceptionData.make_exception_data(exc)

        return JSONResponse(
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            content=make_error_content(
                "validation_error",
                "Validation error",
                details=[_jsonable_error(err) for err in exc.errors()],
                exception_data=exception_data,
                debug=debug,
            ),
        )

    @app.exception_handler(BaseError)
    def base_error_handler(request: Request, exc: BaseError) -> JSONResponse:
        exception_data = ExceptionData.make_exception_data(exc)
        logger.info(
            "Request failed",
            extra={
                "context": {
                    "path": request.url.path,
                    "code": exc.code,
                    "error_message": exc.message,
                }
            },
        )
        content = make_error_content(
            exc.code,
            exc.message,
            details=exc.details,
            exception_data=exception_data,
            debug=debug,
        )
        # Provider status for API errors
        extra = {k: v for k, v in exc.to_payload().items() if k not in content}
        content.update(extra)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    def internal_server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        exception_data = ExceptionData.make_exception_data(exc)
        logger.exception(
            "Unhandled error",
            extra={"context": {"path": request.url.path}},
            exc_info=exc,
        )
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=make_error_content(
                "internal_server_error",
                "Internal server error",
                details=None,
                exception_data=exception_data,
                debug=debug,
            ),
        )


def _jsonable_error(err: Dict[str, Any]) -> Dict[str, Any]:
    # ctx may carry the raised exception object
    return {k: (str(v) if k == "ctx" else v) for k, v in err.items() if k != "input"}


def make_error_content(
    code: str,
    message: str,
    details: Optional[Any],
    exception_data: ExceptionData,
    debug: bool = False,
) -> Dict:
    content = {
        "code": code,
        "message": message,
        "details": details,
    }

    if debug:
        content["exception_data"] = {
            "type": exception_data.exc_type,
            "text": str(exception_data.exc),
            "traceback": exception_data.traceback,
        }

    return content
