"""
Gemini gateway: incident report extraction and grounded "global intel" queries.

Both calls are single attempts. Failures of the call itself raise
``TransportError``; unusable extraction output raises ``ParseError``.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from google import genai
from google.genai import types
from pydantic import ValidationError

from config import CONFIG, REPORT_SYSTEM_INSTRUCTION
from models import Coordinate, GroundingLink, ParsedReport

logger = logging.getLogger(__name__)

NO_INFORMATION_TEXT = "No information available."


class GatewayError(Exception):
    pass


class ParseError(GatewayError):
    """The model returned no text, or text that does not fit ParsedReport."""


class TransportError(GatewayError):
    """The request to the model could not be completed."""


class IntelResult(NamedTuple):
    text: str
    links: list[GroundingLink]


def create_client(api_key: str | None) -> genai.Client | None:
    if not api_key:
        return None
    return genai.Client(api_key=api_key)


def build_report_prompt(text: str) -> str:
    return (
        f'Analyze this emergency report: "{text}". '
        "Extract the location/name, type of resource, and its status."
    )


def extract_report(client: genai.Client, text: str) -> ParsedReport:
    """Parse a free-text incident report into a ParsedReport."""
    try:
        response = client.models.generate_content(
            model=CONFIG["GEMINI_MODEL"],
            contents=build_report_prompt(text),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=ParsedReport,
                system_instruction=REPORT_SYSTEM_INSTRUCTION,
            ),
        )
    except Exception as exc:
        logger.error("Gemini parse request failed: %s", exc)
        raise TransportError(str(exc)) from exc

    raw = response.text
    if not raw or not raw.strip():
        logger.error("Gemini parse error: no text returned from model")
        raise ParseError("No text returned from model")

    try:
        return ParsedReport.model_validate_json(raw)
    except ValidationError as exc:
        logger.error("Gemini parse error: %s", exc)
        raise ParseError(f"Model output does not match the report schema: {raw[:200]}") from exc


def grounding_links(response) -> list[GroundingLink]:
    """(title, uri) pairs from the first candidate's grounding chunks, in service order."""
    candidates = getattr(response, 'candidates', None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], 'grounding_metadata', None)
    chunks = getattr(metadata, 'grounding_chunks', None) or []

    links = []
    for chunk in chunks:
        source = getattr(chunk, 'web', None) or getattr(chunk, 'maps', None)
        title = getattr(source, 'title', None)
        uri = getattr(source, 'uri', None)
        if title and uri:
            links.append(GroundingLink(title=title, uri=uri))
    return links


def _intel_config(observer: Coordinate | None) -> types.GenerateContentConfig:
    tool_config = None
    if observer is not None:
        tool_config = types.ToolConfig(
            retrieval_config=types.RetrievalConfig(
                lat_lng=types.LatLng(latitude=observer.lat, longitude=observer.lon),
            ),
        )
    return types.GenerateContentConfig(
        tools=[types.Tool(google_maps=types.GoogleMaps())],
        tool_config=tool_config,
    )


def query_global_intel(client: genai.Client, query: str,
                       observer: Coordinate | None = None) -> IntelResult:
    """Ask Gemini with Google Maps grounding; returns prose plus source links."""
    try:
        response = client.models.generate_content(
            model=CONFIG["GEMINI_MODEL"],
            contents=query,
            config=_intel_config(observer),
        )
    except Exception as exc:
        logger.error("Gemini map search error: %s", exc)
        raise TransportError(str(exc)) from exc

    text = response.text or NO_INFORMATION_TEXT
    return IntelResult(text=text, links=grounding_links(response))
