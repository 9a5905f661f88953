"""ZodiacSky — Streamlit app: the Sun's real constellation against the calendar sign."""

import datetime

import httpx
import matplotlib.pyplot as plt
import streamlit as st
from dotenv import load_dotenv

load_dotenv()

from zodiacsky.astronomy import CONSTELLATION_NAMES, compute_sky  # noqa: E402
from zodiacsky.catalog import load_catalogs  # noqa: E402
from zodiacsky.compute import Location, search_locations  # noqa: E402
from zodiacsky.config import Settings  # noqa: E402
from zodiacsky.ephemeris import position_model  # noqa: E402
from zodiacsky.renderers.static import render_static_chart  # noqa: E402

st.set_page_config(
    page_title="ZodiacSky",
    page_icon="✦",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown(
    """
    <style>
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #0a0a14 !important;
        color: #f4e4b7;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] { display: none !important; }
    [data-testid="stMetricValue"] { color: #d4af37; }
    </style>
    """,
    unsafe_allow_html=True,
)


@st.cache_resource
def _settings() -> Settings:
    return Settings.from_env()


@st.cache_resource
def _catalogs():
    return load_catalogs(_settings())


@st.cache_resource
def _model():
    return position_model(_settings())


# --- Session state initialization ---
settings = _settings()
if "when" not in st.session_state:
    st.session_state.when = datetime.datetime.now(datetime.timezone.utc).replace(
        second=0, microsecond=0
    )
if "location" not in st.session_state:
    st.session_state.location = Location(
        name="Helsinki, Finland", lat=settings.default_lat, lng=settings.default_lng
    )

# --- Inputs ---
col1, col2, col3, col4 = st.columns([2, 2, 3, 1])
with col1:
    date_val = st.date_input("Date (UTC)", value=st.session_state.when.date())
with col2:
    time_val = st.time_input(
        "Time (UTC)", value=st.session_state.when.time(), step=60
    )
with col3:
    query = st.text_input("Location", placeholder="Search city...")
with col4:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    if st.button("⏱ Now", width="stretch"):
        st.session_state.when = datetime.datetime.now(datetime.timezone.utc).replace(
            second=0, microsecond=0
        )
        st.rerun()

st.session_state.when = datetime.datetime.combine(
    date_val, time_val, tzinfo=datetime.timezone.utc
)

if query:
    try:
        hits = search_locations(query)
    except httpx.HTTPError as e:
        st.error(f"Location search failed: {e}")
        hits = []
    if hits:
        choice = st.selectbox("Results", hits, format_func=lambda loc: loc.name)
        if choice is not None:
            st.session_state.location = choice

rotation = st.slider("Pan view (degrees of RA)", -180, 180, 0, step=5)

# --- Chart ---
stars, constellations = _catalogs()
location: Location = st.session_state.location
when: datetime.datetime = st.session_state.when

fig = render_static_chart(
    when,
    stars,
    constellations,
    observer=location.observer,
    rotation_offset=float(rotation),
    size=(1000, 800),
    model=_model(),
)
st.pyplot(fig, width="stretch")
plt.close(fig)

# --- Comparison ---
sky = compute_sky(when, observer=location.observer, model=_model())
astro = CONSTELLATION_NAMES[sky.constellation]
left, right = st.columns(2)
left.metric("Tropical sign (calendar)", f"{sky.tropical.symbol} {sky.tropical.name}")
right.metric("Sun's actual constellation", f"{astro.symbol} {astro.common}")
st.caption(
    f"{location.name} · {when:%Y-%m-%d %H:%M} UTC · "
    f"Sun altitude {sky.horizon.altitude:.1f}°"
    if sky.horizon is not None
    else location.name
)
