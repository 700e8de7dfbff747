# app.py
# Run: streamlit run app.py

from dotenv import load_dotenv

load_dotenv()  # ← Must precede any import depending on .env

import streamlit as st
import pandas as pd
import pydeck as pdk

from core.config import DEFAULT_CATALOG, DEFAULT_PROPERTY, setup_logging
from core.engine import ItineraryEngine, format_usd
from core.models import DAY_CHIPS
from core.proximity import ProximityCalculator, empty_route
from services import mailer, routing, workbook

setup_logging()

# ──────────────────────────────────────────────────────────────────────────────
# 0. Streamlit configuration
# ──────────────────────────────────────────────────────────────────────────────
st.set_page_config(page_title="Coastal Beach Company", layout="wide")

PROP = DEFAULT_PROPERTY
PRICES = DEFAULT_CATALOG
ROUTE_CACHE_TTL_S = 3600


@st.cache_data(show_spinner=False, ttl=ROUTE_CACHE_TTL_S)
def _cached_route() -> dict:
    # raising keeps a failed fetch out of the cache
    return routing.require_route(ProximityCalculator(PROP).route_request())


def load_route() -> dict:
    """Route geometry is the same for every visitor; fetched once per hour."""
    try:
        return _cached_route()
    except routing.RouteUnavailable:
        return empty_route()


# ──────────────────────────────────────────────────────────────────────────────
# 1. session_state initialisation (one engine per browser session)
# ──────────────────────────────────────────────────────────────────────────────
defaults = {
    "engine": None,
    "save_message": "",
    "error_message": "",
}
for k, v in defaults.items():
    st.session_state.setdefault(k, v)
if st.session_state.engine is None:
    st.session_state.engine = ItineraryEngine(PRICES, PROP)

engine: ItineraryEngine = st.session_state.engine

# ──────────────────────────────────────────────────────────────────────────────
# 2. Header
# ──────────────────────────────────────────────────────────────────────────────
head_left, head_right = st.columns([3, 1])
with head_left:
    st.markdown("**COASTAL** BEACH COMPANY")
    st.markdown(f"### {PROP.name}")
    st.caption(PROP.address)
with head_right:
    st.markdown(f"**{PROP.dates_label}**")
    header_total = st.empty()


def day_chips(key: str, current, on_click) -> None:
    cols = st.columns(len(DAY_CHIPS))
    for col, d in zip(cols, DAY_CHIPS):
        col.button(
            d,
            key=f"{key}_{d}",
            type="primary" if current == d else "secondary",
            on_click=on_click,
            args=(d,),
        )


# ──────────────────────────────────────────────────────────────────────────────
# 3. Chairs + map | sticky itinerary
# ──────────────────────────────────────────────────────────────────────────────
main_col, itin_col = st.columns([3, 1])

with main_col:
    st.subheader("🏖️ Beach Chairs & Umbrellas")
    st.caption(
        f"${PRICES.chair_set_daily}/day · {format_usd(PRICES.chair_set)}/week per set"
        " · 1 set = 2 chairs + 1 umbrella"
    )
    if PROP.included_chair_sets > 0:
        n = PROP.included_chair_sets
        st.caption(f"Home includes {n} set{'s' if n > 1 else ''}")

    q1, q2, q3 = st.columns([1, 1, 6])
    q1.button("–", key="dec", on_click=engine.decrement_chair_sets)
    q2.button("+", key="inc", on_click=engine.increment_chair_sets)
    q3.markdown(f"**{engine.state.chair_set_count}** set(s)")

    # ── Map: home, beach access and the route between them
    calc = ProximityCalculator(PROP)
    prox = calc.proximity()
    route = load_route()

    df_points = pd.DataFrame(
        [
            {"lon": PROP.location.lon, "lat": PROP.location.lat,
             "label": "Home · Bella Vita", "color": [14, 165, 233]},
            {"lon": PROP.beach_access.lon, "lat": PROP.beach_access.lat,
             "label": PROP.beach_access_label, "color": [29, 78, 216]},
        ]
    )
    layers = [
        pdk.Layer(
            "PathLayer",
            data=[{"path": route.get("coordinates", [])}],
            get_path="path",
            get_color=[14, 165, 233],
            width_min_pixels=5,
        ),
        pdk.Layer(
            "ScatterplotLayer",
            data=df_points,
            get_position=["lon", "lat"],
            get_color="color",
            get_radius=12,
            pickable=True,
        ),
        pdk.Layer(
            "TextLayer",
            data=df_points,
            get_position=["lon", "lat"],
            get_text="label",
            get_color=[0, 0, 0, 200],
            get_size=14,
            get_alignment_baseline="'bottom'",
        ),
    ]
    deck = pdk.Deck(
        map_style="mapbox://styles/mapbox/satellite-streets-v12",
        initial_view_state=pdk.ViewState(
            longitude=(PROP.location.lon + PROP.beach_access.lon) / 2,
            latitude=(PROP.location.lat + PROP.beach_access.lat) / 2,
            zoom=14,
            pitch=45,
            bearing=0,
        ),
        layers=layers,
        tooltip={"text": "{label}"},
    )
    st.pydeck_chart(deck)
    st.markdown(f"**Closest Beach Access** · {PROP.beach_access_label} · ~{prox.formatted_label}")

# ──────────────────────────────────────────────────────────────────────────────
# 4. Box / Bonfire / Photo
# ──────────────────────────────────────────────────────────────────────────────
st.markdown("---")
box_col, fire_col, photo_col = st.columns(3)
state = engine.state

with box_col:
    st.subheader("📦 Beach Better Box")
    st.button(
        "Included" if state.supply_box_included else "Include",
        key="box",
        on_click=engine.toggle_supply_box,
    )
    st.markdown(f"**{format_usd(PRICES.supply_box)}/week**")
    st.caption("Add Beach Better Box to unlock bundle savings.")

with fire_col:
    st.subheader("🔥 Beach Bonfire")
    st.button(
        "Scheduled" if state.bonfire_day else "Include",
        key="bonfire",
        on_click=engine.toggle_bonfire,
    )
    st.markdown(f"**From {format_usd(PRICES.bonfire)}** · pick a night")
    day_chips("bonfire", state.bonfire_day, engine.set_bonfire_day)

with photo_col:
    st.subheader("📸 Family Photography")
    st.button(
        "Scheduled" if state.photo_day else "Include",
        key="photo",
        on_click=engine.toggle_photo_session,
    )
    st.markdown(f"**{format_usd(PRICES.photo_session)}** · 45–60 min")
    day_chips("photo", state.photo_day, engine.set_photo_day)

# ──────────────────────────────────────────────────────────────────────────────
# 5. Itinerary (rendered last so it reflects every click of this run)
# ──────────────────────────────────────────────────────────────────────────────
itin = engine.compute_itinerary()
header_total.markdown(f"**Est. total: {format_usd(itin.total)}**")

with itin_col:
    st.subheader("🗓️ Your itinerary")
    for item in itin.line_items:
        left, right = st.columns([3, 1])
        left.markdown(f"**{item.label}**")
        left.caption(item.note)
        right.markdown(f"**{format_usd(item.amount)}**")
    st.markdown("---")
    st.markdown(f"Total  **{format_usd(itin.total)}**")

    with st.form("save_form"):
        email_input = st.text_input("Email address", placeholder="you@email.com")
        submitted = st.form_submit_button("Save & email")
    if submitted:
        try:
            xlsx = workbook.generate_workbook(itin, PROP, email_input)
            mailer.send_itinerary_email(email_input, itin, PROP, attachment_path=xlsx)
            st.session_state.save_message = "✉️ Itinerary sent! Check your inbox."
            st.session_state.error_message = ""
        except Exception as e:
            st.session_state.error_message = f"❌ Failed to send: {e}"
            st.session_state.save_message = ""

    if st.session_state.save_message:
        st.success(st.session_state.save_message)
    if st.session_state.error_message:
        st.error(st.session_state.error_message)
    st.caption(f"Powered by {PROP.brand}. Plans can be updated anytime before arrival.")
