"""FleetIQ Streamlit Dashboard — live view of the fleet API.

Layout: sidebar controls (connection, add/remove unit, quick actions) → headline
stat cards with trend deltas → four tabs (Fleet | Alerts & Activity |
Intelligence | Trends).  All state lives in the API server; the dashboard only
polls it and posts user actions.

Run with:
    streamlit run src/fleetiq_simulator/dashboard/app.py
"""

from __future__ import annotations

import time

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from fleetiq_simulator.dashboard.client import DEFAULT_API_URL, FleetAPIClient, FleetAPIError

STATUS_COLOURS = {"active": "#00b894", "charging": "#fdcb6e", "maintenance": "#d63031"}
SEVERITY_ICONS = {"critical": "🔴", "warning": "🟠", "info": "🔵"}
QUICK_ACTIONS = {
    "optimize_routes": "🛣️ Optimize routes",
    "smart_charging": "🔌 Smart charging",
    "predict_demand": "📈 Predict demand",
    "schedule_maintenance": "🔧 Schedule maintenance",
}

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(page_title="FleetIQ", page_icon="🚕", layout="wide")

st.markdown("""
<div style="margin-bottom: 4px;">
    <div style="font-family: 'Inter', sans-serif; font-size: 1.5rem; font-weight: 800; letter-spacing: -0.8px; line-height: 1.2;">
        FleetIQ Fleet Simulator
    </div>
    <div style="font-family: 'Inter', sans-serif; font-size: 0.7rem; font-weight: 500; opacity: 0.45; letter-spacing: 1.2px; text-transform: uppercase; margin-top: 2px;">
        Autonomous cabs &amp; delivery drones
    </div>
</div>
""", unsafe_allow_html=True)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _fmt_trend(value: int | None) -> str | None:
    """Streamlit metric delta; ``None`` hides it (insufficient data)."""
    return None if value is None else f"{value:+d}%"


def _card(icon: str, label: str, value: str, accent: str = "#6c5ce7") -> str:
    """Return HTML for a small unit card with colored top accent."""
    return f"""
    <div style="
        border: 1px solid rgba(127,127,127,0.2);
        border-top: 3px solid {accent};
        border-radius: 8px;
        padding: 10px 12px;
        margin-bottom: 8px;
    ">
        <div style="font-weight: 700;">{icon} {label}</div>
        <div style="font-size: 0.8rem; opacity: 0.75;">{value}</div>
    </div>
    """


def _units_frame(units: dict) -> pd.DataFrame:
    rows = []
    for unit in [*units["vehicles"], *units["drones"]]:
        rows.append({
            "ID": unit["id"],
            "Kind": unit["kind"],
            "Model": unit["type"],
            "Status": unit["status"],
            "Battery %": round(unit["battery"], 1),
            "Efficiency %": round(unit["efficiency"], 1),
            "Revenue $": round(unit.get("revenue", 0.0), 2) if unit["kind"] == "vehicle" else None,
            "Location": unit["location"]["address"],
            "lat": unit["location"]["lat"],
            "lng": unit["location"]["lng"],
        })
    return pd.DataFrame(rows)


def _run(label: str, fn, *args, **kwargs):
    """Call the API and surface failures in the page instead of crashing."""
    try:
        return fn(*args, **kwargs)
    except FleetAPIError as exc:
        st.error(f"{label} failed: {exc}")
        return None


# ---------------------------------------------------------------------------
# SIDEBAR — connection and actions
# ---------------------------------------------------------------------------
st.sidebar.header("Connection")
api_url = st.sidebar.text_input("API URL", value=DEFAULT_API_URL)
auto_refresh = st.sidebar.toggle("Auto refresh", value=True)
refresh_s = st.sidebar.slider("Refresh every (s)", min_value=2, max_value=30, value=4)

client = FleetAPIClient(api_url)

health = _run("Health check", client.health)
if health is None:
    st.stop()
st.sidebar.caption(
    f"API v{health['version']} · predictions: {health['providers']['predictions']} · "
    f"insights: {health['providers']['insights']}"
)

with st.sidebar.expander("Add unit", expanded=False):
    with st.form("add_unit", clear_on_submit=True):
        kind = st.radio("Kind", ["vehicle", "drone"], horizontal=True)
        unit_type = st.text_input("Model", placeholder="Tesla Model 3 / Delivery Quad")
        location = st.text_input("Location", placeholder="Downtown LA")
        battery = st.slider("Battery %", 0, 100, 100)
        if st.form_submit_button("Add"):
            added = _run("Add unit", client.add_unit, kind, unit_type, location, battery)
            if added:
                st.success(f"{added['id']} added")

with st.sidebar.expander("Quick actions", expanded=True):
    for action, label in QUICK_ACTIONS.items():
        if st.button(label, use_container_width=True, key=f"qa_{action}"):
            result = _run(label, client.quick_action, action)
            if result:
                st.toast(result["message"])

# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------
units = _run("Load units", client.units) or {"vehicles": [], "drones": []}
snapshot = _run("Load snapshot", client.snapshot)
trends = _run("Load trends", client.trends)
alerts = _run("Load alerts", client.alerts) or []
activity = _run("Load activity", client.activity) or []
predictions = _run("Load predictions", client.predictions) or {}

# ---------------------------------------------------------------------------
# Headline stats
# ---------------------------------------------------------------------------
if snapshot and trends:
    pct = trends["percentages"]
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Active vehicles", snapshot["active_vehicles"], _fmt_trend(pct["active_vehicles"]))
    c2.metric("Total revenue", f"${snapshot['total_revenue']:,.2f}", _fmt_trend(pct["revenue"]))
    c3.metric("Avg efficiency", f"{snapshot['average_efficiency']:.1f}%", _fmt_trend(pct["efficiency"]))
    c4.metric("Active alerts", snapshot["active_alerts"], _fmt_trend(pct["alerts"]), delta_color="inverse")

fleet_tab, alerts_tab, intel_tab, trends_tab = st.tabs(["Fleet", "Alerts & Activity", "Intelligence", "Trends"])

# ---------------------------------------------------------------------------
# Fleet tab
# ---------------------------------------------------------------------------
with fleet_tab:
    df = _units_frame(units)
    if df.empty:
        st.info("No units in the fleet.")
    else:
        fig_map = go.Figure()
        for status, colour in STATUS_COLOURS.items():
            sub = df[df["Status"] == status]
            if sub.empty:
                continue
            fig_map.add_trace(go.Scattermapbox(
                lat=sub["lat"], lon=sub["lng"], mode="markers",
                marker=dict(size=12, color=colour),
                text=sub["ID"] + " · " + sub["Location"] + " · " + sub["Battery %"].astype(str) + "%",
                name=status,
            ))
        fig_map.update_layout(
            mapbox=dict(style="open-street-map", center=dict(lat=34.05, lon=-118.3), zoom=9),
            height=380, margin=dict(l=0, r=0, t=0, b=0),
            legend=dict(orientation="h", y=1.02, x=0),
        )
        st.plotly_chart(fig_map, use_container_width=True)

        st.dataframe(df.drop(columns=["lat", "lng"]), use_container_width=True, hide_index=True)

        cols = st.columns(3)
        for i, unit in enumerate([*units["vehicles"], *units["drones"]]):
            pred = predictions.get(unit["id"]) or {}
            maint = pred.get("maintenance")
            detail = f"{unit['status']} · {unit['battery']:.0f}% · {unit['location']['address']}"
            if maint:
                detail += f" · risk {maint['risk_score']}"
            with cols[i % 3]:
                st.markdown(
                    _card("🚕" if unit["kind"] == "vehicle" else "🛸", unit["id"], detail,
                          STATUS_COLOURS.get(unit["status"], "#6c5ce7")),
                    unsafe_allow_html=True,
                )
                if st.button("Remove", key=f"rm_{unit['id']}"):
                    if _run("Remove unit", client.remove_unit, unit["id"]):
                        st.rerun()

# ---------------------------------------------------------------------------
# Alerts & activity tab
# ---------------------------------------------------------------------------
with alerts_tab:
    left, right = st.columns(2)
    with left:
        st.subheader("Alerts")
        if not alerts:
            st.success("No active alerts.")
        for alert in alerts:
            st.markdown(
                f"{SEVERITY_ICONS.get(alert['severity'], '⚪')} **{alert['unit_id']}** {alert['message']}  \n"
                f"<span style='opacity:0.5;font-size:0.75rem'>{alert['type']} · {alert['timestamp'][11:19]}</span>",
                unsafe_allow_html=True,
            )
    with right:
        st.subheader("Live activity")
        for item in activity:
            st.markdown(f"{item['icon']} {item['message']} "
                        f"<span style='opacity:0.5;font-size:0.75rem'>{item['timestamp'][11:19]}</span>",
                        unsafe_allow_html=True)

# ---------------------------------------------------------------------------
# Intelligence tab
# ---------------------------------------------------------------------------
with intel_tab:
    c1, c2 = st.columns(2)
    if c1.button("🤖 Generate AI insights"):
        _run("Generate insights", client.generate_insights)
    if c2.button("🧠 Refresh predictions"):
        predictions = _run("Refresh predictions", client.refresh_predictions) or predictions

    for insight in _run("Load insights", client.insights) or []:
        with st.container(border=True):
            st.markdown(f"**{insight['title']}** · {insight['impact']} impact · {insight['confidence']:.0f}% confidence")
            st.write(insight["recommendation"])
            if insight["action"] in QUICK_ACTIONS and st.button(
                QUICK_ACTIONS[insight["action"]], key=f"ins_{insight['id']}_{insight['action']}",
            ):
                result = _run("Quick action", client.quick_action, insight["action"])
                if result:
                    st.toast(result["message"])

    if predictions:
        pred_rows = [
            {
                "Unit": uid,
                "Risk": p["maintenance"]["risk_score"] if p.get("maintenance") else None,
                "Days to service": p["maintenance"]["days_until_maintenance"] if p.get("maintenance") else None,
                "Action": p["maintenance"]["recommended_action"] if p.get("maintenance") else None,
                "Battery hours": round(p["battery"]["hours_remaining"], 1) if p.get("battery") else None,
                "Source": p["maintenance"]["source"] if p.get("maintenance") else None,
            }
            for uid, p in predictions.items()
        ]
        st.dataframe(pd.DataFrame(pred_rows), use_container_width=True, hide_index=True)

    with st.expander("Fleet report"):
        narrative = _run("Load report", client.narrative)
        if narrative:
            st.code(narrative, language=None)

# ---------------------------------------------------------------------------
# Trends tab
# ---------------------------------------------------------------------------
with trends_tab:
    history = (trends or {}).get("history") or []
    if len(history) < 2:
        st.info("Trend history builds up every 30 seconds.")
    else:
        hist = pd.DataFrame(history)
        fig_rev = go.Figure()
        fig_rev.add_trace(go.Scatter(y=hist["total_revenue"], mode="lines+markers", name="Revenue"))
        fig_rev.update_layout(title="Total revenue ($)", height=300, margin=dict(l=10, r=10, t=40, b=10))
        st.plotly_chart(fig_rev, use_container_width=True)

        fig_ops = go.Figure()
        fig_ops.add_trace(go.Scatter(y=hist["average_efficiency"], mode="lines", name="Avg efficiency %"))
        fig_ops.add_trace(go.Scatter(y=hist["active_vehicles"], mode="lines", name="Active vehicles", yaxis="y2"))
        fig_ops.update_layout(
            title="Efficiency and active vehicles", height=300, margin=dict(l=10, r=10, t=40, b=10),
            yaxis2=dict(overlaying="y", side="right"),
        )
        st.plotly_chart(fig_ops, use_container_width=True)

if auto_refresh:
    time.sleep(refresh_s)
    st.rerun()
