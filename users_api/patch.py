# users_api/patch.py
"""JSON Patch (RFC 6902) application onto a blank update draft."""
import logging
from typing import Any, List, Tuple

import jsonpatch
import jsonpointer

from .exceptions import BadRequest, FieldErrors, add_error

logger = logging.getLogger(__name__)


def _normalize_pointer(pointer: Any, fields: dict) -> Any:
    # Member names are matched case-insensitively ("/FirstName" == "/firstName").
    if not isinstance(pointer, str) or not pointer.startswith("/"):
        return pointer
    head, sep, rest = pointer[1:].partition("/")
    name = fields.get(head.lower())
    if name is None:
        return pointer
    return "/" + name + sep + rest


def normalize_operations(operations: List[dict], draft: dict) -> List[dict]:
    fields = {name.lower(): name for name in draft}
    normalized = []
    for op in operations:
        if not isinstance(op, dict):
            raise BadRequest("patch operations must be JSON objects")
        op = dict(op)
        for key in ("path", "from"):
            if key in op:
                op[key] = _normalize_pointer(op[key], fields)
        normalized.append(op)
    return normalized


def apply_patch(document: Any, draft: dict) -> Tuple[dict, FieldErrors]:
    """
    Apply `document` to a copy of `draft`.

    Returns the patched draft and the errors met on the way. Application
    stops at the first failing operation, like the patch itself would. A
    member the draft does not have is reported as an error, not added.
    """
    if not isinstance(document, list):
        raise BadRequest("a patch document must be a JSON array")

    errors: FieldErrors = {}
    operations = normalize_operations(document, draft)
    try:
        patched = jsonpatch.JsonPatch(operations).apply(draft)
    except (jsonpatch.JsonPatchException, jsonpointer.JsonPointerException) as e:
        logger.debug("Patch rejected: %s", e)
        add_error(errors, "", str(e))
        return dict(draft), errors

    if not isinstance(patched, dict):
        add_error(errors, "", "The patch must produce a JSON object.")
        return dict(draft), errors

    for name in patched.keys() - draft.keys():
        add_error(
            errors, name,
            f"The target location specified by path segment '{name}' was not found.",
        )
    return patched, errors
