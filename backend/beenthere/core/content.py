"""
Request/response body encoding.

JSON is the default in both directions. XML is accepted when the request's
Content-Type says so and produced when the Accept header prefers it.
"""

import json
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ValidationFailure

XML_MEDIA_TYPES = ("application/xml", "text/xml")
JSON_MEDIA_TYPE = "application/json"


def _media_type(header: Optional[str]) -> str:
    return (header or "").split(";")[0].strip().lower()


def _accepted_types(accept: str):
    """Media types of an Accept header ordered by their q value."""
    ranked = []
    for position, part in enumerate(accept.split(",")):
        pieces = [p.strip() for p in part.split(";")]
        quality = 1.0
        for param in pieces[1:]:
            if param.startswith("q="):
                try:
                    quality = float(param[2:])
                except ValueError:
                    quality = 0.0
        if pieces[0]:
            ranked.append((-quality, position, pieces[0].lower()))
    return [media for _, _, media in sorted(ranked)]


def wants_xml(request: Request) -> bool:
    for media in _accepted_types(request.headers.get("accept", "")):
        if media in XML_MEDIA_TYPES:
            return True
        if media in (JSON_MEDIA_TYPE, "application/*", "*/*"):
            return False
    return False


def _parse_xml(raw: bytes) -> Dict[str, Any]:
    root = ET.fromstring(raw)
    return {child.tag: (child.text or "").strip() for child in root}


async def decode_body(request: Request) -> Dict[str, Any]:
    """Decode the request body into a mapping of fields."""
    raw = await request.body()
    if not raw.strip():
        raise ValidationFailure("unable to parse body: empty body")

    media_type = _media_type(request.headers.get("content-type"))
    try:
        if media_type in XML_MEDIA_TYPES:
            data = _parse_xml(raw)
        else:
            data = json.loads(raw)
    except (ValueError, ET.ParseError) as e:
        raise ValidationFailure(f"unable to parse body: {e}") from e

    if not isinstance(data, dict):
        raise ValidationFailure("unable to parse body: expected an object")
    return data


def _to_xml(parent: ET.Element, value: Any, item_tag: str) -> None:
    if isinstance(value, dict):
        for key, child_value in value.items():
            child = ET.SubElement(parent, key)
            _to_xml(child, child_value, item_tag)
    elif isinstance(value, list):
        for item in value:
            _to_xml(ET.SubElement(parent, item_tag), item, item_tag)
    elif value is None:
        return
    elif isinstance(value, bool):
        parent.text = "true" if value else "false"
    else:
        parent.text = str(value)


def encode_xml(payload: Any, root: str, item_tag: str = "item") -> bytes:
    element = ET.Element(root)
    _to_xml(element, jsonable_encoder(payload), item_tag)
    return ET.tostring(element, encoding="utf-8", xml_declaration=True)


def render(
    request: Request,
    payload: Any,
    root: str = "response",
    item_tag: str = "item",
    status_code: int = 200,
) -> Response:
    """Encode ``payload`` in the format the client asked for."""
    if wants_xml(request):
        return Response(
            content=encode_xml(payload, root, item_tag),
            status_code=status_code,
            media_type="application/xml",
        )
    return JSONResponse(content=jsonable_encoder(payload), status_code=status_code)


async def http_error(request: Request, exc: StarletteHTTPException) -> Response:
    """Error responses in the negotiated format. JSON keeps FastAPI's default body."""
    if not wants_xml(request):
        return await http_exception_handler(request, exc)
    return Response(
        content=encode_xml({"detail": exc.detail}, "error"),
        status_code=exc.status_code,
        media_type="application/xml",
        headers=getattr(exc, "headers", None),
    )
