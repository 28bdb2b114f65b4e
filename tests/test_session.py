"""Tests for the dashboard session view-model."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from config import INTEL_FAILURE_TEXT
from gemini_service import IntelResult, ParseError, TransportError
from models import (
    ChatMessage,
    Coordinate,
    GroundingLink,
    ParsedReport,
    ResourcePoint,
    ResourceStatus,
    ResourceType,
)
from proximity import distance_km, project
from session import SEED_RESOURCES, DashboardSession, default_center, seed_resources

PARSED = ParsedReport(
    name="Sector 4 Water Tank",
    type=ResourceType.WATER,
    status=ResourceStatus.CRITICAL,
    notes="Contaminated",
)


# ---------------------------------------------------------------------------
# Seed data and location
# ---------------------------------------------------------------------------


class TestSeedData:
    def test_seed_resources_placed_around_center(self) -> None:
        center = default_center()
        resources = seed_resources(center)

        assert [r.id for r in resources] == [s[0] for s in SEED_RESOURCES]
        assert resources[0].coordinate == center
        x, y = project(center, resources[1].coordinate)
        assert x == pytest.approx(75)
        assert y == pytest.approx(25)

    def test_new_session_starts_without_observer(self) -> None:
        session = DashboardSession()
        assert session.observer is None
        assert session.nearby() == []
        assert len(session.resources) == len(SEED_RESOURCES)
        assert session.messages == []
        assert session.processing is False


class TestObserver:
    def test_first_fix_adds_simulated_resources(self, observer: Coordinate) -> None:
        session = DashboardSession(resources=[])

        assert session.set_observer(observer) is True
        assert session.observer == observer
        assert [r.id for r in session.resources] == ["h1", "h2", "d1"]

    def test_later_fixes_are_ignored(self, observer: Coordinate) -> None:
        session = DashboardSession(resources=[])
        session.set_observer(observer)

        assert session.set_observer(Coordinate(lat=0.0, lon=0.0)) is False
        assert session.observer == observer
        assert len(session.resources) == 3

    def test_missing_fix_keeps_no_observer_mode(self) -> None:
        session = DashboardSession()
        assert session.set_observer(None) is False
        assert session.observer is None

    def test_nearby_uses_configured_radius(self) -> None:
        session = DashboardSession()
        session.set_observer(default_center())

        nearby = session.nearby()
        assert len(nearby) == len(SEED_RESOURCES) + 3
        assert all(distance_km(session.observer, r.coordinate) <= 5.0 for r in nearby)

    def test_nearby_with_explicit_radius(self, observer: Coordinate) -> None:
        session = DashboardSession(resources=[])
        session.set_observer(observer)

        assert [r.id for r in session.nearby(0.45)] == ["d1"]


# ---------------------------------------------------------------------------
# Selection and status updates
# ---------------------------------------------------------------------------


class TestSelection:
    def test_select_and_clear(self) -> None:
        session = DashboardSession()
        session.select("2")
        assert session.selected().name == "North River Pump"
        session.select(None)
        assert session.selected() is None

    def test_unknown_selection(self) -> None:
        session = DashboardSession()
        session.select("missing")
        assert session.selected() is None


class TestUpdateStatus:
    def test_replaces_resource_wholesale(self) -> None:
        session = DashboardSession()
        original = session.resources[1]

        updated = session.update_status("2", ResourceStatus.OPERATIONAL)

        assert session.resources[1] is updated
        assert updated is not original
        assert updated.status == ResourceStatus.OPERATIONAL
        assert updated.last_updated == "Just now"
        assert original.status == ResourceStatus.CRITICAL
        assert updated.coordinate == original.coordinate

    def test_accepts_string_status(self) -> None:
        session = DashboardSession()
        assert session.update_status("1", "CROWDED").status == ResourceStatus.CROWDED

    def test_unknown_resource(self) -> None:
        session = DashboardSession()
        with pytest.raises(KeyError):
            session.update_status("missing", ResourceStatus.UNKNOWN)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class TestSubmitReport:
    @patch("session.extract_report")
    def test_adds_and_selects_new_resource(self, mock_extract: MagicMock, observer: Coordinate) -> None:
        mock_extract.return_value = PARSED
        session = DashboardSession(resources=[], seed=7)
        session.set_observer(observer)
        client = MagicMock()

        resource = session.submit_report(client, "The water tank at Sector 4 is contaminated.")

        mock_extract.assert_called_once_with(client, "The water tank at Sector 4 is contaminated.")
        assert isinstance(resource, ResourcePoint)
        assert session.resources[-1] is resource
        assert session.selected_id == resource.id
        assert resource.name == "Sector 4 Water Tank"
        assert resource.type == ResourceType.WATER
        assert resource.status == ResourceStatus.CRITICAL
        assert resource.last_updated == "Just now"
        assert session.processing is False

    @patch("session.extract_report")
    def test_new_resource_lands_inside_grid(self, mock_extract: MagicMock, observer: Coordinate) -> None:
        mock_extract.return_value = PARSED
        session = DashboardSession(resources=[], seed=3)
        session.set_observer(observer)

        for _ in range(5):
            resource = session.submit_report(MagicMock(), "report")
            x, y = project(observer, resource.coordinate)
            assert 10 <= x <= 90
            assert 10 <= y <= 90

    @patch("session.extract_report")
    def test_ids_are_unique(self, mock_extract: MagicMock) -> None:
        mock_extract.return_value = PARSED
        session = DashboardSession(resources=[])

        ids = {session.submit_report(MagicMock(), "report").id for _ in range(10)}
        assert len(ids) == 10

    @patch("session.extract_report")
    def test_blank_input_is_ignored(self, mock_extract: MagicMock) -> None:
        session = DashboardSession()
        assert session.submit_report(MagicMock(), "   ") is None
        mock_extract.assert_not_called()

    @patch("session.extract_report")
    def test_refused_while_processing(self, mock_extract: MagicMock) -> None:
        session = DashboardSession()
        session.processing = True
        assert session.submit_report(MagicMock(), "report") is None
        mock_extract.assert_not_called()

    @patch("session.extract_report")
    def test_parse_error_adds_nothing(self, mock_extract: MagicMock) -> None:
        mock_extract.side_effect = ParseError("No text returned from model")
        session = DashboardSession()
        before = list(session.resources)

        with pytest.raises(ParseError):
            session.submit_report(MagicMock(), "report")

        assert session.resources == before
        assert session.processing is False

    @patch("session.extract_report")
    def test_transport_error_propagates(self, mock_extract: MagicMock) -> None:
        mock_extract.side_effect = TransportError("down")
        session = DashboardSession()

        with pytest.raises(TransportError):
            session.submit_report(MagicMock(), "report")
        assert session.processing is False


# ---------------------------------------------------------------------------
# Intel chat
# ---------------------------------------------------------------------------


class TestSubmitIntelQuery:
    @patch("session.query_global_intel")
    def test_appends_user_and_model_messages(self, mock_query: MagicMock, observer: Coordinate) -> None:
        links = [GroundingLink(title="Shelter", uri="https://shelter.example")]
        mock_query.return_value = IntelResult(text="Go north.", links=links)
        session = DashboardSession()
        session.set_observer(observer)
        client = MagicMock()

        reply = session.submit_intel_query(client, "nearest shelter?")

        mock_query.assert_called_once_with(client, "nearest shelter?", observer=observer)
        assert [m.role for m in session.messages] == ["user", "model"]
        assert session.messages[0].text == "nearest shelter?"
        assert reply is session.messages[1]
        assert reply.links == links
        assert session.processing is False

    @patch("session.query_global_intel")
    def test_transport_failure_becomes_system_message(self, mock_query: MagicMock) -> None:
        mock_query.side_effect = TransportError("down")
        session = DashboardSession()

        reply = session.submit_intel_query(MagicMock(), "anything")

        assert isinstance(reply, ChatMessage)
        assert reply.role == "system"
        assert reply.text == INTEL_FAILURE_TEXT
        assert reply.links == []
        assert [m.role for m in session.messages] == ["user", "system"]
        assert session.processing is False

    @patch("session.query_global_intel")
    def test_history_is_append_only(self, mock_query: MagicMock) -> None:
        mock_query.side_effect = [
            IntelResult(text="first", links=[]),
            TransportError("down"),
            IntelResult(text="third", links=[]),
        ]
        session = DashboardSession()

        for q in ("q1", "q2", "q3"):
            session.submit_intel_query(MagicMock(), q)

        assert [m.text for m in session.messages] == [
            "q1", "first", "q2", INTEL_FAILURE_TEXT, "q3", "third",
        ]
        assert len({m.id for m in session.messages}) == 6

    @patch("session.query_global_intel")
    def test_blank_query_is_ignored(self, mock_query: MagicMock) -> None:
        session = DashboardSession()
        assert session.submit_intel_query(MagicMock(), "") is None
        assert session.messages == []
        mock_query.assert_not_called()
