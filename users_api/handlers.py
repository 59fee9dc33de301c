# users_api/handlers.py
"""
The users resource, independent of the web framework.

Each operation takes already-parsed inputs (path id, decoded JSON body,
query values) and returns an `ApiResult` or raises a `UsersApiError`.
The route layer only decodes requests, builds links and renders bodies.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError

from .exceptions import BadRequest, FieldErrors, NotFound, ValidationFailed, add_error
from .mapping import entity_to_dto, post_dto_to_entity, update_dto_to_entity
from .patch import apply_patch
from .repository import UserRepository
from .schemas import PaginationHeader, PostUserDto, UpdateUserDto

logger = logging.getLogger(__name__)

EMPTY_ID = UUID(int=0)
DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 20
ALLOWED_METHODS = ("GET", "POST", "OPTIONS")
LOGIN_MESSAGE = "Login must contain only letters and digits."

M = TypeVar("M", bound=BaseModel)


class LinkBuilder(Protocol):
    def user_url(self, user_id: UUID) -> str: ...

    def users_url(self, page_number: int, page_size: int) -> str: ...


@dataclass
class ApiResult:
    status_code: int
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)


# ── Input helpers ──────────────────────────────────────────────────────────────
def parse_user_id(raw: str) -> UUID:
    """A path id that is not a UUID binds to the empty id."""
    try:
        return UUID(str(raw))
    except ValueError:
        return EMPTY_ID


def parse_int(raw: Optional[str], default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def clamp_paging(page_number: int, page_size: int):
    page_number = max(page_number, 1)
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
    return page_number, page_size


def is_valid_login(login: str) -> bool:
    return all(ch.isalnum() for ch in login)


def validation_errors(model: Type[BaseModel], error: ValidationError) -> FieldErrors:
    errors: FieldErrors = {}
    fields = model.model_fields
    for e in error.errors():
        loc = e.get("loc") or ()
        name = str(loc[0]) if loc else ""
        if name in fields:
            name = fields[name].alias or name
        if e.get("type") == "value_error" and "error" in e.get("ctx", {}):
            message = str(e["ctx"]["error"])
        else:
            message = e["msg"]
        add_error(errors, name, message)
    return errors


def validate(model: Type[M], body: Any, errors: Optional[FieldErrors] = None) -> M:
    """Validate `body` as `model`, raising every structural error at once."""
    errors = dict(errors or {})
    try:
        result = model.model_validate(body)
    except ValidationError as e:
        for name, messages in validation_errors(model, e).items():
            errors.setdefault(name, []).extend(messages)
        result = None
    if errors:
        raise ValidationFailed(errors)
    return result


def _require_object(body: Any) -> dict:
    if body is None:
        raise BadRequest("request body is required")
    if not isinstance(body, dict):
        raise BadRequest("request body must be a JSON object")
    return body


# ── Endpoint ───────────────────────────────────────────────────────────────────
class UsersEndpoint:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    def get_user(self, user_id: UUID, head: bool = False) -> ApiResult:
        user = self.repository.find_by_id(user_id)
        if user is None:
            raise NotFound(f"user {user_id} not found")
        if head:
            return ApiResult(200, headers={
                "Content-Type": "application/json; charset=utf-8",
                "Content-Length": "0",
            })
        return ApiResult(200, entity_to_dto(user))

    def create_user(self, body: Any, links: LinkBuilder) -> ApiResult:
        dto = validate(PostUserDto, _require_object(body))
        if not is_valid_login(dto.login):
            logger.debug("Rejected login %r", dto.login)
            raise ValidationFailed({"login": [LOGIN_MESSAGE]})

        created = self.repository.insert(post_dto_to_entity(dto))
        return ApiResult(201, created.id, {"Location": links.user_url(created.id)})

    def update_user(self, user_id: UUID, body: Any, links: LinkBuilder) -> ApiResult:
        body = _require_object(body)
        if user_id == EMPTY_ID:
            raise BadRequest("user id is empty")
        dto = validate(UpdateUserDto, body)

        _, inserted = self.repository.update_or_insert(update_dto_to_entity(dto, user_id))
        if inserted:
            return ApiResult(201, user_id, {"Location": links.user_url(user_id)})
        return ApiResult(204)

    def patch_user(self, user_id: UUID, document: Any) -> ApiResult:
        if document is None:
            raise BadRequest("patch document is required")

        # Unset members take their defaults: the patch resets, it does not merge.
        patched, errors = apply_patch(document, UpdateUserDto.draft())
        if user_id == EMPTY_ID:
            raise NotFound("user id is empty")
        dto = validate(UpdateUserDto, patched, errors)

        if self.repository.find_by_id(user_id) is None:
            raise NotFound(f"user {user_id} not found")
        self.repository.update(update_dto_to_entity(dto, user_id))
        return ApiResult(204)

    def delete_user(self, user_id: UUID) -> ApiResult:
        if self.repository.find_by_id(user_id) is None:
            raise NotFound(f"user {user_id} not found")
        self.repository.delete(user_id)
        return ApiResult(204)

    def list_users(self, page_number: int, page_size: int, links: LinkBuilder) -> ApiResult:
        page_number, page_size = clamp_paging(page_number, page_size)
        page = self.repository.get_page(page_number, page_size)
        if not page.items:
            raise NotFound(f"page {page_number} of size {page_size} is empty")

        pagination = PaginationHeader(
            previous_page_link=links.users_url(page_number - 1, page_size) if page.has_previous else None,
            next_page_link=links.users_url(page_number + 1, page_size) if page.has_next else None,
            total_count=page.total_count,
            page_size=page_size,
            current_page=page_number,
            total_pages=page.total_pages,
        )
        return ApiResult(
            200,
            [entity_to_dto(user) for user in page.items],
            {"X-Pagination": pagination.model_dump_json(by_alias=True)},
        )

    def options(self) -> ApiResult:
        return ApiResult(200, headers={"Allow": ", ".join(ALLOWED_METHODS)})
