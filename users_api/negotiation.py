# users_api/negotiation.py
"""
Response representations and `Accept` header negotiation.

Two representations exist, JSON (the default) and XML. A request whose
`Accept` header matches neither is refused with NotAcceptable rather than
answered in JSON.
"""
import json
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from .exceptions import NotAcceptable
from .schemas import XML_ILLEGAL

logger = logging.getLogger(__name__)

XSI = "http://www.w3.org/2001/XMLSchema-instance"
ET.register_namespace("i", XSI)


@dataclass(frozen=True)
class Representation:
    name: str
    media_type: str
    accepts: Tuple[str, ...]

    @property
    def content_type(self) -> str:
        return f"{self.media_type}; charset=utf-8"

    def matches(self, media_range: str) -> bool:
        if media_range == "*/*":
            return True
        kind, _, subtype = media_range.partition("/")
        for candidate in self.accepts:
            c_kind, _, c_subtype = candidate.partition("/")
            if kind == c_kind and subtype in ("*", c_subtype):
                return True
        return False

    def render(self, body: Any) -> bytes:
        if self.name == "json":
            return render_json(body)
        return render_xml(body)


JSON = Representation("json", "application/json", ("application/json", "text/json"))
XML = Representation("xml", "application/xml", ("application/xml", "text/xml"))
REPRESENTATIONS = (JSON, XML)


# ── Accept parsing ─────────────────────────────────────────────────────────────
def parse_accept(header: Optional[str]) -> List[Tuple[str, float]]:
    """Media ranges of an Accept header, highest quality first (stable on ties)."""
    ranges = []
    for part in (header or "").split(","):
        media, *params = [p.strip() for p in part.split(";")]
        if not media:
            continue
        quality = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = -1.0
        if quality <= 0 or quality > 1:
            continue
        ranges.append((media.lower(), quality))
    return sorted(ranges, key=lambda r: r[1], reverse=True)


def negotiate(accept: Optional[str]) -> Representation:
    if accept is None or not accept.strip():
        return JSON
    for media_range, _ in parse_accept(accept):
        for representation in REPRESENTATIONS:
            if representation.matches(media_range):
                return representation
    logger.debug("No acceptable representation for Accept: %s", accept)
    raise NotAcceptable(f"cannot produce any of: {accept}")


# ── Rendering ──────────────────────────────────────────────────────────────────
def render_json(body: Any) -> bytes:
    return json.dumps(
        jsonable_encoder(body, by_alias=True),
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


def _pascal(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return XML_ILLEGAL.sub("", str(value))


def _model_element(model: BaseModel) -> ET.Element:
    element = ET.Element(type(model).__name__)
    for name in type(model).model_fields:
        child = ET.SubElement(element, _pascal(name))
        value = getattr(model, name)
        if value is None:
            child.set(f"{{{XSI}}}nil", "true")
        else:
            child.text = _scalar_text(value)
    return element


def to_element(body: Any) -> ET.Element:
    if isinstance(body, BaseModel):
        return _model_element(body)
    if isinstance(body, list):
        item_name = type(body[0]).__name__ if body else "anyType"
        element = ET.Element(f"ArrayOf{item_name}")
        for item in body:
            element.append(to_element(item))
        return element
    if isinstance(body, UUID):
        element = ET.Element("guid")
        element.text = str(body)
        return element
    if isinstance(body, dict):
        # field -> [messages], the validation error mapping
        element = ET.Element("SerializableError")
        for field, messages in body.items():
            field_element = ET.SubElement(element, "Field", name=_scalar_text(field))
            for message in messages:
                ET.SubElement(field_element, "Message").text = _scalar_text(message)
        return element
    element = ET.Element("value")
    element.text = _scalar_text(body)
    return element


def render_xml(body: Any) -> bytes:
    return ET.tostring(to_element(body), encoding="unicode").encode("utf-8")
