"""
HTML fragments for the dashboard: the stylized radar grid, resource cards
and intel links. Names, notes and link titles come from model output and
are always escaped.
"""

from html import escape

import pandas as pd

from models import ResourceStatus, ResourceType

STATUS_COLORS = {
    ResourceStatus.OPERATIONAL.value: '#10b981',
    ResourceStatus.CROWDED.value: '#f59e0b',
    ResourceStatus.CRITICAL.value: '#ef4444',
    ResourceStatus.UNKNOWN.value: '#94a3b8',
}

TYPE_ICONS = {
    ResourceType.WATER.value: '💧',
    ResourceType.SHELTER.value: '⛺',
    ResourceType.MEDICAL.value: '✚',
    ResourceType.DANGER.value: '⚠️',
}

DEFAULT_COLOR = '#ffffff'
DEFAULT_ICON = '📍'


def status_color(status: str) -> str:
    return STATUS_COLORS.get(getattr(status, 'value', status), DEFAULT_COLOR)


def type_icon(rtype: str) -> str:
    return TYPE_ICONS.get(getattr(rtype, 'value', rtype), DEFAULT_ICON)


def _marker(row) -> str:
    color = status_color(row['status'])
    return f"""
    <div class="radar-point" title="{escape(row['name'])} ({escape(row['distance'])})"
         style="left: {row['x']:.2f}%; top: {row['y']:.2f}%; border-color: {color}; color: {color};">
        {type_icon(row['type'])}
    </div>"""


def build_radar_html(frame: pd.DataFrame, has_fix: bool = True, label: str = "GRID: SEC-04") -> str:
    """Radar markup with one marker per row of ``frame`` and the observer at the center."""
    markers = ''.join(_marker(row) for _, row in frame.iterrows())
    observer = '<div class="radar-self"></div>' if has_fix else (
        '<div class="radar-offline">NO LOCATION FIX</div>'
    )
    return f"""
<style>
    .radar {{
        position: relative;
        width: 100%;
        aspect-ratio: 1 / 1;
        background-color: #0f172a;
        background-image: linear-gradient(#334155 1px, transparent 1px),
                          linear-gradient(90deg, #334155 1px, transparent 1px);
        background-size: 20px 20px;
        border: 1px solid #1e293b;
        border-radius: 12px;
        overflow: hidden;
    }}
    .radar-ring {{
        position: absolute; inset: 0;
        border: 1px solid rgba(34, 197, 94, 0.15);
        border-radius: 50%;
        pointer-events: none;
    }}
    .radar-point {{
        position: absolute;
        transform: translate(-50%, -50%);
        padding: 4px 6px;
        border: 2px solid;
        border-radius: 9999px;
        background: #0f172a;
        font-size: 14px;
        line-height: 1;
    }}
    .radar-self {{
        position: absolute; left: 50%; top: 50%;
        width: 12px; height: 12px;
        transform: translate(-50%, -50%);
        background: #3b82f6;
        border: 2px solid #bfdbfe;
        border-radius: 9999px;
    }}
    .radar-offline {{
        position: absolute; left: 50%; top: 50%;
        transform: translate(-50%, -50%);
        color: #64748b; font-family: monospace; font-size: 12px;
    }}
    .radar-label {{
        position: absolute; right: 8px; bottom: 8px;
        color: #64748b; font-family: monospace; font-size: 10px;
    }}
</style>
<div class="radar">
    <div class="radar-ring"></div>
    {observer}{markers}
    <div class="radar-label">{escape(label)}</div>
</div>
"""


def resource_card_html(res, distance: str | None = None) -> str:
    """List card for one resource; ``distance`` is a preformatted label."""
    color = status_color(res.status)
    distance_text = f" · {escape(distance)}" if distance else ""
    return f"""<div class="resource-card" style="border-left-color: {color}">
    <h4>{type_icon(res.type)} {escape(res.name)}</h4>
    <p>{escape(res.notes)}</p>
    <div class="resource-meta">{escape(res.last_updated)}{distance_text} · {res.type.value} · {res.status.value}</div>
</div>"""


def intel_link_html(link) -> str:
    """Grounding link; anything other than an http(s) uri is shown as plain text."""
    title = escape(link.title)
    if not link.uri.lower().startswith(('http://', 'https://')):
        return f'<span class="intel-link">🧭 {title}</span>'
    return (f'<span class="intel-link">🧭 <a href="{escape(link.uri, quote=True)}" '
            f'target="_blank" rel="noreferrer">{title}</a></span>')
