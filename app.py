import streamlit as st
from streamlit_geolocation import streamlit_geolocation

from config import (
    CONFIG,
    REPORT_FAILURE_TEXT,
    configure_logging,
    get_gemini_api_key,
)
from gemini_service import GatewayError, create_client
from location import (
    coordinate_from_geolocation,
    get_ip_location,
    reverse_geocode,
)
from models import ResourceStatus
from proximity import distance_km, format_distance, nearby_frame
from radar import (
    build_radar_html,
    intel_link_html,
    resource_card_html,
    status_color,
    type_icon,
)
from session import DashboardSession

configure_logging()

st.set_page_config(
    page_title="CIVIL SAVE | Field Command",
    page_icon="🛡️",
    layout="centered",
    initial_sidebar_state="collapsed"
)

st.markdown("""
<style>
    .block-container { max-width: 28rem; padding-top: 1rem; }
    .app-title { font-size: 1.2rem; font-weight: bold; letter-spacing: 0.1em; color: #f1f5f9; margin: 0; }
    .net-status { font-family: monospace; font-size: 0.65rem; color: #22c55e; }
    .net-status.offline { color: #f59e0b; }
    .version-tag {
        font-family: monospace; font-size: 0.7rem; color: #64748b;
        border: 1px solid #334155; border-radius: 4px; padding: 2px 6px; float: right;
    }
    .section-label { font-family: monospace; font-size: 0.8rem; color: #94a3b8; }
    .resource-card {
        padding: 0.75rem; margin-bottom: 0.25rem;
        background: #1e293b; border-radius: 8px; border-left: 4px solid;
    }
    .resource-card h4 { margin: 0; font-size: 0.95rem; color: #e2e8f0; }
    .resource-card p { margin: 0.25rem 0; font-size: 0.85rem; color: #94a3b8; }
    .resource-meta { font-family: monospace; font-size: 0.7rem; color: #64748b; }
    .badge {
        display: inline-block; padding: 1px 6px; margin-right: 4px;
        border-radius: 4px; font-size: 0.65rem; font-weight: bold; color: #000;
    }
    .intel-link { font-size: 0.75rem; }
</style>
""", unsafe_allow_html=True)

TABS = ["🗺 GRID", "📡 REPORT", "📶 INTEL"]

# ========== SESSION STATE INITIALIZATION ==========
if 'session' not in st.session_state:
    st.session_state.session = DashboardSession()

if 'location_label' not in st.session_state:
    st.session_state.location_label = None

if 'gemini_client' not in st.session_state:
    st.session_state.gemini_client = create_client(get_gemini_api_key())

if 'report_input' not in st.session_state:
    st.session_state.report_input = ""

session: DashboardSession = st.session_state.session
client = st.session_state.gemini_client

# Tab switches requested by the previous run are applied before the radio is drawn
if '_next_tab' in st.session_state:
    st.session_state.active_tab = st.session_state.pop('_next_tab')

# ========== HEADER ==========
ai_online = client is not None
status_class = "net-status" if ai_online else "net-status offline"
status_text = "● NETWORK ONLINE" if ai_online else "● AI OFFLINE (no GEMINI_API_KEY)"
st.markdown(f"""
<span class="version-tag">v2.4.0</span>
<p class="app-title">🛡️ CIVIL SAVE</p>
<div class="{status_class}">{status_text}</div>
""", unsafe_allow_html=True)

active_tab = st.radio("Navigation", TABS, key="active_tab", horizontal=True, label_visibility="collapsed")


def render_detail_panel():
    res = session.selected()
    if res is None:
        return

    with st.container(border=True):
        col_title, col_close = st.columns([5, 1])
        with col_title:
            color = status_color(res.status)
            st.markdown(f"### {type_icon(res.type)} {res.name}")
            st.markdown(
                f'<span class="badge" style="background:{color}">{res.status.value}</span>'
                f'<span class="badge" style="background:#334155;color:#cbd5e1">{res.type.value}</span>',
                unsafe_allow_html=True
            )
        with col_close:
            if st.button("✕", key="close_detail"):
                session.select(None)
                st.rerun()

        st.info(res.notes or "No notes.")
        if session.observer:
            st.caption(f"📍 {format_distance(distance_km(session.observer, res.coordinate))} from you · "
                       f"updated {res.last_updated}")
        else:
            st.caption(f"Updated {res.last_updated}")

        col_nav, col_update = st.columns(2)
        with col_nav:
            nav_url = ("https://www.google.com/maps/dir/?api=1&destination="
                       f"{res.coordinate.lat:.6f},{res.coordinate.lon:.6f}")
            st.link_button("🧭 NAVIGATE", nav_url, use_container_width=True)
        with col_update:
            statuses = [s.value for s in ResourceStatus]
            new_status = st.selectbox("Status", statuses, index=statuses.index(res.status.value),
                                      key=f"status_{res.id}", label_visibility="collapsed")
            if st.button("UPDATE STATUS", key=f"update_{res.id}", use_container_width=True,
                         disabled=new_status == res.status.value):
                session.update_status(res.id, ResourceStatus(new_status))
                st.rerun()


# ========== GRID ==========
if active_tab == TABS[0]:
    col_label, col_legend = st.columns([3, 2])
    with col_label:
        st.markdown('<span class="section-label">SECTOR VIEW // LIVE</span>', unsafe_allow_html=True)
    with col_legend:
        st.markdown('<span class="section-label">🟢 Safe &nbsp; 🔴 Crit</span>', unsafe_allow_html=True)

    if session.observer is None:
        col_gps, col_gps_label = st.columns([1, 5])
        with col_gps:
            gps = streamlit_geolocation()
        with col_gps_label:
            st.caption("📍 Tap to share your device location")
        fix = coordinate_from_geolocation(gps)
        if fix and session.set_observer(fix):
            st.session_state.location_label = reverse_geocode(fix)
            st.rerun()

        if st.button("🌐 Use approximate IP location", use_container_width=True):
            with st.spinner("🌍 Estimating location..."):
                approx = get_ip_location()
            if approx and session.set_observer(approx):
                st.session_state.location_label = {
                    'city': f"Approx. ({approx.lat:.2f}, {approx.lon:.2f})",
                    'country': 'Unknown',
                    'source': 'IP Geolocation'
                }
                st.rerun()
            else:
                st.warning("⚠️ Location unavailable. The grid stays in standby until a fix is acquired.")
    elif st.session_state.location_label:
        label = st.session_state.location_label
        st.caption(f"📍 {label['city']}, {label['country']} · {label['source']}")

    radius = CONFIG["NEARBY_RADIUS_KM"]
    frame = nearby_frame(session.observer, session.resources, radius)
    st.markdown(build_radar_html(frame, has_fix=session.observer is not None), unsafe_allow_html=True)

    st.markdown(f"#### Nearby Resources (< {radius:g} km)")
    if session.observer is None:
        st.caption("No location fix. Showing all tracked resources.")
        listing = [(res, None) for res in session.resources]
    else:
        distances = dict(zip(frame['id'], frame['distance']))
        listing = [(res, distances[res.id]) for res in session.nearby(radius)]
        if not listing:
            st.info("✅ No tracked resources in range")

    for res, distance in listing:
        st.markdown(resource_card_html(res, distance), unsafe_allow_html=True)
        if st.button("Details", key=f"select_{res.id}"):
            session.select(res.id)
            st.rerun()

    render_detail_panel()

# ========== REPORT ==========
elif active_tab == TABS[1]:
    st.markdown("## Broadcast Update")
    st.caption("State location, resource type, and situation clearly.")

    with st.form("report_form"):
        report_text = st.text_area(
            "Report",
            value=st.session_state.report_input,
            placeholder="e.g., 'The water tank at Sector 4 is contaminated.'",
            height=130,
            label_visibility="collapsed"
        )
        submitted = st.form_submit_button("📤 BROADCAST REPORT", type="primary",
                                          use_container_width=True)

    if submitted:
        if not report_text.strip():
            st.error("❌ Please describe the situation")
        elif not ai_online:
            st.warning("⚠️ AI unavailable")
        else:
            st.session_state.report_input = report_text
            try:
                with st.spinner("ENCRYPTING & SENDING..."):
                    resource = session.submit_report(client, report_text)
            except GatewayError:
                st.error(f"❌ {REPORT_FAILURE_TEXT}")
            else:
                if resource:
                    st.session_state.report_input = ""
                    st.session_state._next_tab = TABS[0]
                    st.rerun()

# ========== INTEL ==========
elif active_tab == TABS[2]:
    st.markdown("## 🔎 GLOBAL INTEL")

    if not session.messages:
        st.markdown("""<div style="text-align:center;color:#475569;margin:3rem 0;">
            <p>Connect to Global Command.</p>
            <p style="font-size:0.85rem">Ask for shelter locations, news, or map data.</p>
            </div>""", unsafe_allow_html=True)

    for msg in session.messages:
        avatar = {"user": "🧑", "model": "🛰", "system": "⚠️"}[msg.role]
        with st.chat_message("user" if msg.role == "user" else "assistant", avatar=avatar):
            st.markdown(msg.text)
            for link in msg.links:
                st.markdown(intel_link_html(link), unsafe_allow_html=True)

    query = st.chat_input("Query global database...")
    if query:
        if not ai_online:
            st.warning("⚠️ AI unavailable")
        else:
            with st.spinner("Receiving transmission..."):
                session.submit_intel_query(client, query)
            st.rerun()
