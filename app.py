"""
Shipment Tracker - Live Dashboard
Hosts the registry, the file-exchange watcher and (optionally) the HTTP
carrier in this process, and tracks shipments by id.
"""
import streamlit as st

from shipment_tracker.config import EXCHANGE_DIR, HTTP_HOST, HTTP_PORT, configure_logging
from shipment_tracker.ui.charts import build_status_timeline
from shipment_tracker.ui.tracker_view import TrackerView, format_timestamp

# ═══════════════════════════════════════════════════════════════
# PAGE CONFIG (MUST BE FIRST)
# ═══════════════════════════════════════════════════════════════
st.set_page_config(
    page_title="Shipment Tracker",
    layout="wide",
    initial_sidebar_state="expanded"
)


# ═══════════════════════════════════════════════════════════════
# RUNTIME (ONCE PER PROCESS)
# ═══════════════════════════════════════════════════════════════
@st.cache_resource
def get_runtime():
    """Registry, service and carriers shared by every browser session."""
    from shipment_tracker.async_engine.file_watcher import FileExchangeWatcher
    from shipment_tracker.core.registry import ShipmentRegistry
    from shipment_tracker.core.tracking_service import TrackingService

    configure_logging()
    registry = ShipmentRegistry()
    service = TrackingService(registry)
    watcher = FileExchangeWatcher(service, EXCHANGE_DIR)
    watcher.start()
    return {"registry": registry, "service": service, "watcher": watcher, "http": None}


def start_http_carrier(runtime):
    from shipment_tracker.integrations.http_api import serve_in_background
    if runtime["http"] is None:
        runtime["http"] = serve_in_background(runtime["service"], HTTP_HOST, HTTP_PORT)


runtime = get_runtime()

# ═══════════════════════════════════════════════════════════════
# SESSION STATE (MINIMAL)
# ═══════════════════════════════════════════════════════════════
if "tracker" not in st.session_state:
    st.session_state.tracker = TrackerView(runtime["registry"])

tracker = st.session_state.tracker

# ═══════════════════════════════════════════════════════════════
# HEADER
# ═══════════════════════════════════════════════════════════════
st.title("📦 Shipment Tracker")
st.caption("Event-driven • Live observer updates")

# ═══════════════════════════════════════════════════════════════
# SIDEBAR: CARRIERS + MANUAL INPUT
# ═══════════════════════════════════════════════════════════════
with st.sidebar:
    st.markdown("### 🔌 Carriers")
    st.write(f"**File exchange:** {'🟢 running' if runtime['watcher'].running else '🔴 stopped'}")

    if runtime["http"] is None:
        if st.button(f"Start HTTP on {HTTP_HOST}:{HTTP_PORT}"):
            start_http_carrier(runtime)
            st.rerun()
    else:
        st.write(f"**HTTP:** 🟢 http://{HTTP_HOST}:{HTTP_PORT}")

    st.divider()
    st.markdown("### ✏️ Send Event")
    line = st.text_input("Event line", placeholder="created,s1,express,1700000000000")
    if st.button("Submit") and line:
        service = runtime["service"]
        if line.split(",", 1)[0].strip().lower() == "created":
            response = service.create_shipment(line)
        else:
            response = service.update_shipment(line)
        if response.success:
            st.success(response.message)
        else:
            st.error(response.message)

    st.metric("Shipments", len(runtime["registry"]))

# ═══════════════════════════════════════════════════════════════
# TRACK BY ID
# ═══════════════════════════════════════════════════════════════
col1, col2, col3 = st.columns([3, 1, 1])
with col1:
    shipment_id = st.text_input("🔍 Shipment ID", placeholder="s1")
with col2:
    if st.button("Track / Untrack"):
        tracker.toggle_tracking(shipment_id)
with col3:
    if st.button("Stop All"):
        tracker.stop_all()

if tracker.error_message:
    st.warning(tracker.error_message)

snapshots = tracker.tracked()

if not snapshots:
    st.info("Enter a shipment ID to start tracking")
else:
    st.dataframe(tracker.summary_rows(), use_container_width=True, hide_index=True)

    for snapshot in snapshots:
        title = f"📦 {snapshot.id} - {snapshot.status}"
        if snapshot.is_abnormal:
            title += " ⚠️"
        with st.expander(title, expanded=True):
            left, right = st.columns(2)
            with left:
                st.write(f"**Type:** {snapshot.category.value}")
                st.write(f"**Status:** {snapshot.status}")
                st.write(f"**Location:** {snapshot.current_location or 'Unknown'}")
            with right:
                st.write(f"**Expected delivery:** {format_timestamp(snapshot.expected_delivery_timestamp)}")
                if snapshot.is_abnormal:
                    st.error(f"Abnormal: {snapshot.abnormality_reason}")

            if snapshot.notes:
                st.markdown("**Notes**")
                for note in snapshot.notes:
                    st.write(f"• {note}")

            st.dataframe(
                tracker.history_frame(snapshot.id)[["time", "description"]],
                use_container_width=True,
                hide_index=True,
            )

    st.markdown("### 📜 All Updates")
    history = tracker.history_frame()
    fig = build_status_timeline(history)
    if fig is not None:
        st.plotly_chart(fig, use_container_width=True)

    if st.button("🔄 Refresh"):
        st.rerun()
