# users_api/exceptions.py
from typing import Dict, List

FieldErrors = Dict[str, List[str]]


class UsersApiError(Exception):
    """Terminal outcome of a request; `status_code` is the HTTP status."""

    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class BadRequest(UsersApiError):
    status_code = 400


class NotFound(UsersApiError):
    status_code = 404


class NotAcceptable(UsersApiError):
    status_code = 406


class ValidationFailed(UsersApiError):
    status_code = 422

    def __init__(self, errors: FieldErrors):
        super().__init__("; ".join(f"{k or '<body>'}: {', '.join(v)}" for k, v in errors.items()))
        self.errors = errors


def add_error(errors: FieldErrors, field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)
