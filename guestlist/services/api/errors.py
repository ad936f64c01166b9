# guestlist/services/api/errors.py
from __future__ import annotations

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from guestlist.domain.enums import ErrorKind
from guestlist.domain.errors import GuestlistError

STATUS_BY_KIND = {
    ErrorKind.not_found: HTTPStatus.NOT_FOUND,
    ErrorKind.conflict: HTTPStatus.CONFLICT,
    ErrorKind.forbidden: HTTPStatus.FORBIDDEN,
    ErrorKind.validation: HTTPStatus.UNPROCESSABLE_ENTITY,
    ErrorKind.unavailable: HTTPStatus.SERVICE_UNAVAILABLE,
}


async def guestlist_error_handler(request: Request, exc: GuestlistError) -> JSONResponse:
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(exc.kind, HTTPStatus.BAD_REQUEST),
        content=exc.as_dict(),
        headers=headers,
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GuestlistError, guestlist_error_handler)
