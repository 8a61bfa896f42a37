"""Response content negotiation.

Representations can be returned as JSON or XML. The client's ``Accept``
header picks the format; no header or a wildcard selects JSON, and a header
that admits neither format is answered with 406.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any

from fastapi import Request
from pydantic import BaseModel
from starlette.responses import JSONResponse, Response

from src.user_api.core.errors import NotAcceptableError

JSON = "application/json"
XML = "application/xml"
TEXT_XML = "text/xml"

_EXACT = {JSON: JSON, XML: XML, TEXT_XML: TEXT_XML}
# Wildcards resolve to the first of their candidates the client has not refused.
_WILDCARDS = {
    "*/*": (JSON, XML, TEXT_XML),
    "application/*": (JSON, XML),
    "text/*": (TEXT_XML,),
}


def _parse_accept(header: str) -> list[tuple[str, float]]:
    """Split an Accept header into (media range, q) pairs, best first."""
    ranges = []
    for position, part in enumerate(header.split(",")):
        media, *params = (piece.strip() for piece in part.split(";"))
        if not media:
            continue
        quality = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        ranges.append((media.lower(), quality, position))

    ranges.sort(key=lambda item: (-item[1], item[2]))
    return [(media, quality) for media, quality, _ in ranges]


def select_media_type(accept: str | None) -> str:
    """Pick the response media type for an ``Accept`` header value.

    Raises:
        NotAcceptableError: If neither JSON nor XML is acceptable.
    """
    if accept is None or not accept.strip():
        return JSON

    ranges = _parse_accept(accept)
    refused = {media for media, quality in ranges if quality <= 0}

    for media, quality in ranges:
        if quality <= 0:
            continue
        if media in _EXACT:
            return _EXACT[media]
        for candidate in _WILDCARDS.get(media, ()):
            if candidate not in refused:
                return candidate

    raise NotAcceptableError(f"Cannot produce a response matching '{accept}'")


def get_response_media_type(request: Request) -> str:
    """FastAPI dependency resolving the negotiated media type."""
    return select_media_type(request.headers.get("accept"))


def _to_data(content: Any) -> Any:
    if isinstance(content, BaseModel):
        return content.model_dump(by_alias=True, mode="json")
    if isinstance(content, list):
        return [_to_data(item) for item in content]
    return content


def _to_element(tag: str, data: Any) -> ET.Element:
    element = ET.Element(tag)
    if isinstance(data, Mapping):
        for key, value in data.items():
            if value is not None:
                element.append(_to_element(key, value))
    elif isinstance(data, list):
        item_tag = tag[:-1] if tag.endswith("s") else "item"
        for item in data:
            element.append(_to_element(item_tag, item))
    elif isinstance(data, bool):
        element.text = "true" if data else "false"
    elif data is not None:
        element.text = str(data)
    return element


def to_xml(data: Any, root: str) -> bytes:
    return ET.tostring(_to_element(root, data), encoding="utf-8", xml_declaration=True)


def render(
    content: Any,
    media_type: str,
    root: str,
    status_code: int = 200,
    headers: Mapping[str, str] | None = None,
) -> Response:
    """Serialise ``content`` in the negotiated format.

    ``root`` names the XML document element; lists use a plural root whose
    children take the singular name (``users`` holds ``user`` elements).
    """
    data = _to_data(content)
    if media_type == JSON:
        return JSONResponse(content=data, status_code=status_code, headers=headers)
    return Response(
        content=to_xml(data, root),
        status_code=status_code,
        headers=headers,
        media_type=media_type,
    )
