# users_api/main.py
import logging
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import URL
from starlette.responses import Response

from .config import Settings, get_settings, setup_logging
from .exceptions import NotAcceptable, UsersApiError, ValidationFailed
from .handlers import (
    DEFAULT_PAGE_NUMBER, DEFAULT_PAGE_SIZE, ApiResult, UsersEndpoint,
    parse_int, parse_user_id,
)
from .negotiation import negotiate
from .repository import UserRepository

logger = logging.getLogger(__name__)


# ── Wiring ─────────────────────────────────────────────────────────────────────
def get_endpoint(request: Request) -> UsersEndpoint:
    return request.app.state.endpoint


class RequestLinks:
    """Absolute links to the users routes, relative to the current request."""

    def __init__(self, request: Request):
        self.request = request

    def user_url(self, user_id: UUID) -> str:
        return str(self.request.url_for("get_user_by_id", user_id=str(user_id)))

    def users_url(self, page_number: int, page_size: int) -> str:
        url = URL(str(self.request.url_for("get_users")))
        return str(url.include_query_params(pageNumber=page_number, pageSize=page_size))


def render(request: Request, result: ApiResult) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code, headers=result.headers)

    representation = negotiate(request.headers.get("accept"))
    return Response(
        content=representation.render(result.body),
        status_code=result.status_code,
        headers={**result.headers, "Content-Type": representation.content_type},
    )


# ── Error handlers ─────────────────────────────────────────────────────────────
async def users_api_error_handler(request: Request, exc: UsersApiError) -> Response:
    logger.debug("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
    if isinstance(exc, ValidationFailed):
        try:
            representation = negotiate(request.headers.get("accept"))
        except NotAcceptable:
            return Response(status_code=NotAcceptable.status_code)
        return Response(
            content=representation.render(exc.errors),
            status_code=exc.status_code,
            headers={"Content-Type": representation.content_type},
        )
    return Response(status_code=exc.status_code)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    # Only a body that is not valid JSON gets here.
    logger.debug("%s %s -> 400 %s", request.method, request.url.path, exc.errors())
    return Response(status_code=400)


# ── Endpoints ──────────────────────────────────────────────────────────────────
router = APIRouter(prefix="/api/users", tags=["users"])


@router.api_route("/{user_id}", methods=["GET", "HEAD"], name="get_user_by_id")
def get_user_by_id(
        request: Request,
        user_id: str,
        endpoint: UsersEndpoint = Depends(get_endpoint),
):
    result = endpoint.get_user(parse_user_id(user_id), head=request.method == "HEAD")
    return render(request, result)


@router.post("", name="create_user")
def create_user(
        request: Request,
        body: Any = Body(None),
        endpoint: UsersEndpoint = Depends(get_endpoint),
):
    return render(request, endpoint.create_user(body, RequestLinks(request)))


@router.put("/{user_id}", name="update_user")
def update_user(
        request: Request,
        user_id: str,
        body: Any = Body(None),
        endpoint: UsersEndpoint = Depends(get_endpoint),
):
    result = endpoint.update_user(parse_user_id(user_id), body, RequestLinks(request))
    return render(request, result)


@router.patch("/{user_id}", name="partially_update_user")
def partially_update_user(
        request: Request,
        user_id: str,
        document: Any = Body(None),
        endpoint: UsersEndpoint = Depends(get_endpoint),
):
    return render(request, endpoint.patch_user(parse_user_id(user_id), document))


@router.delete("/{user_id}", name="delete_user")
def delete_user(
        request: Request,
        user_id: str,
        endpoint: UsersEndpoint = Depends(get_endpoint),
):
    return render(request, endpoint.delete_user(parse_user_id(user_id)))


@router.get("", name="get_users")
def get_users(
        request: Request,
        page_number: Optional[str] = Query(None, alias="pageNumber"),
        page_size: Optional[str] = Query(None, alias="pageSize"),
        endpoint: UsersEndpoint = Depends(get_endpoint),
):
    result = endpoint.list_users(
        parse_int(page_number, DEFAULT_PAGE_NUMBER),
        parse_int(page_size, DEFAULT_PAGE_SIZE),
        RequestLinks(request),
    )
    return render(request, result)


@router.options("", name="options_for_users")
def options_for_users(request: Request, endpoint: UsersEndpoint = Depends(get_endpoint)):
    return render(request, endpoint.options())


# ── App ────────────────────────────────────────────────────────────────────────
def create_app(
        repository: Optional[UserRepository] = None,
        settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Users API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Location", "X-Pagination"],
    )
    app.add_exception_handler(UsersApiError, users_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    app.state.endpoint = UsersEndpoint(repository if repository is not None else UserRepository())
    app.include_router(router)

    logger.info("Users API ready")
    return app


def main():
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "users_api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
