"""Shared test fixtures."""

import os

# config.py reads these at import time
os.environ.setdefault("GEMINI_MODEL", "gemini-2.5-flash")
os.environ.pop("REPORT_SYSTEM_INSTRUCTION", None)
os.environ.pop("NEARBY_RADIUS_KM", None)

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from google.genai import types  # noqa: E402

from models import Coordinate  # noqa: E402


def make_response(text=None, chunks=None) -> types.GenerateContentResponse:
    """Build a GenerateContentResponse with optional grounding chunks."""
    parts = [types.Part(text=text)] if text is not None else []
    metadata = types.GroundingMetadata(grounding_chunks=chunks) if chunks is not None else None
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=parts),
                grounding_metadata=metadata,
            )
        ]
    )


def web_chunk(title=None, uri=None) -> types.GroundingChunk:
    return types.GroundingChunk(web=types.GroundingChunkWeb(title=title, uri=uri))


@pytest.fixture
def observer() -> Coordinate:
    return Coordinate(lat=40.0, lon=-74.0)


@pytest.fixture
def client() -> MagicMock:
    return MagicMock()
