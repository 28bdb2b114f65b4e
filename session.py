"""
Per-browser-session state for the dashboard.

One ``DashboardSession`` lives in ``st.session_state`` and is the only thing
that mutates the resource list and the intel chat history.
"""

from __future__ import annotations

import logging
import uuid

import numpy as np

from config import CONFIG, INTEL_FAILURE_TEXT
from gemini_service import TransportError, extract_report, query_global_intel
from models import ChatMessage, Coordinate, ResourcePoint, ResourceStatus, ResourceType
from proximity import filter_nearby, generate_nearby_resources, unproject

logger = logging.getLogger(__name__)

# (id, name, type, status, grid x, grid y, last updated, notes)
SEED_RESOURCES = [
    ('1', 'Central Station Shelter', ResourceType.SHELTER, ResourceStatus.OPERATIONAL, 50, 50, '10m ago',
     'Capacity at 40%'),
    ('2', 'North River Pump', ResourceType.WATER, ResourceStatus.CRITICAL, 75, 25, '1h ago',
     'Filter broken, do not drink'),
    ('3', 'Field Hospital Alpha', ResourceType.MEDICAL, ResourceStatus.CROWDED, 30, 70, '5m ago',
     'High volume of patients'),
    ('4', 'Sector 9 Checkpoint', ResourceType.DANGER, ResourceStatus.CRITICAL, 20, 20, '2m ago',
     'Road blocked'),
]


def default_center() -> Coordinate:
    lat, lon = CONFIG["DEFAULT_CENTER"]
    return Coordinate(lat=lat, lon=lon)


def seed_resources(center: Coordinate | None = None) -> list[ResourcePoint]:
    center = center or default_center()
    return [
        ResourcePoint(
            id=rid, name=name, type=rtype, status=status,
            coordinate=unproject(center, x, y),
            notes=notes, last_updated=updated,
        )
        for rid, name, rtype, status, x, y, updated, notes in SEED_RESOURCES
    ]


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


class DashboardSession:
    def __init__(self, resources: list[ResourcePoint] | None = None, seed: int | None = None,
                 simulated_extra: int = 0):
        self.resources: list[ResourcePoint] = list(resources) if resources is not None else seed_resources()
        self.messages: list[ChatMessage] = []
        self.observer: Coordinate | None = None
        self.processing = False
        self.selected_id: str | None = None
        self.simulated_extra = simulated_extra
        self._rng = np.random.default_rng(seed)

    # ---------- Location ---------- #

    def set_observer(self, coordinate: Coordinate | None) -> bool:
        """Accept the first location fix. Returns True if the fix was applied."""
        if coordinate is None or self.observer is not None:
            return False
        self.observer = coordinate
        known = {r.id for r in self.resources}
        for res in generate_nearby_resources(coordinate, extra=self.simulated_extra):
            if res.id not in known:
                self.resources.append(res)
        logger.info("Observer fixed at %.4f, %.4f", coordinate.lat, coordinate.lon)
        return True

    def nearby(self, max_distance_km: float | None = None) -> list[ResourcePoint]:
        radius = CONFIG["NEARBY_RADIUS_KM"] if max_distance_km is None else max_distance_km
        return filter_nearby(self.observer, self.resources, radius)

    # ---------- Selection ---------- #

    def select(self, resource_id: str | None):
        self.selected_id = resource_id

    def selected(self) -> ResourcePoint | None:
        if self.selected_id is None:
            return None
        return self.get(self.selected_id)

    def get(self, resource_id: str) -> ResourcePoint | None:
        return next((r for r in self.resources if r.id == resource_id), None)

    def update_status(self, resource_id: str, status: ResourceStatus) -> ResourcePoint:
        """Replace the resource with a copy carrying the new status."""
        for i, res in enumerate(self.resources):
            if res.id == resource_id:
                updated = res.model_copy(update={'status': ResourceStatus(status), 'last_updated': 'Just now'})
                self.resources[i] = updated
                return updated
        raise KeyError(resource_id)

    # ---------- Report ---------- #

    def _random_location(self) -> Coordinate:
        x, y = self._rng.uniform(10, 90, size=2)
        return unproject(self.observer or default_center(), float(x), float(y))

    def submit_report(self, client, text: str) -> ResourcePoint | None:
        """Turn a free-text report into a new resource.

        Returns None when the input is blank or another request is running.
        ParseError and TransportError propagate; nothing is added in that case.
        """
        if not text or not text.strip() or self.processing:
            return None

        self.processing = True
        try:
            parsed = extract_report(client, text)
        finally:
            self.processing = False

        resource = ResourcePoint(
            id=_new_id(),
            name=parsed.name,
            type=parsed.type,
            status=parsed.status,
            coordinate=self._random_location(),
            notes=parsed.notes,
            last_updated='Just now',
        )
        self.resources.append(resource)
        self.selected_id = resource.id
        logger.info("Report added: %s (%s, %s)", resource.name, resource.type.value, resource.status.value)
        return resource

    # ---------- Intel ---------- #

    def submit_intel_query(self, client, query: str) -> ChatMessage | None:
        """Append the user's question and the reply. Transport failures become a system message."""
        if not query or not query.strip() or self.processing:
            return None

        self.messages.append(ChatMessage(id=_new_id(), role='user', text=query))
        self.processing = True
        try:
            result = query_global_intel(client, query, observer=self.observer)
            reply = ChatMessage(id=_new_id(), role='model', text=result.text, links=result.links)
        except TransportError:
            reply = ChatMessage(id=_new_id(), role='system', text=INTEL_FAILURE_TEXT)
        finally:
            self.processing = False

        self.messages.append(reply)
        return reply
