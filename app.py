import logging

import streamlit as st
import pandas as pd
import numpy as np
import altair as alt
import plotly.graph_objects as go

import yardage_engine as ye  # <-- adjustment engine
import registration as reg

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# Page config
# ------------------------------------------------------------
st.set_page_config(
    page_title="Course Caddy Tournament",
    page_icon="⛳",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ------------------------------------------------------------
# Session state defaults
# ------------------------------------------------------------

DEFAULTS = {
    "bag": [{"name": c.name, "distance": c.base_distance_yards} for c in reg.default_bag()],
    "multi_day": False,
    "num_days": 2,
}

# time of day -> (temp °F, humidity %) prefilled for a new day
DAY_DEFAULTS = {
    "morning": (68, 75),
    "afternoon": (82, 55),
    "evening": (74, 65),
}

POSITIVE_COLOR = "#2ecc71"
NEGATIVE_COLOR = "#e74c3c"


def init_session_state():
    for k, v in DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v


init_session_state()


def _condition_inputs(prefix: str, day_label: str) -> dict:
    """Temp/humidity inputs for one day, returned in stored-record shape."""
    out = {}
    st.markdown(f"**{day_label}**")
    for label in ye.TIMES_OF_DAY:
        temp_default, hum_default = DAY_DEFAULTS[label]
        col_t, col_h = st.columns(2)
        out[f"{label}Temp"] = col_t.number_input(
            f"{label.title()} Temp (°F)",
            value=temp_default,
            step=1,
            key=f"{prefix}_{label}_temp",
        )
        out[f"{label}Humidity"] = col_h.number_input(
            f"{label.title()} Humidity (%)",
            min_value=0,
            max_value=100,
            value=hum_default,
            step=1,
            key=f"{prefix}_{label}_hum",
        )
    return out


def _cell(value: int, delta: int) -> str:
    text = ye.format_delta(delta)
    return f"{value} ({text})" if text else f"{value}"


# ------------------------------------------------------------
# Sidebar: tournament record
# ------------------------------------------------------------

with st.sidebar:
    st.header("Tournament")

    t_name = st.text_input("Tournament Name", value="Member-Guest")
    t_course = st.text_input("Course", value="Pine Valley")
    t_elevation = st.number_input(
        "Course Elevation (ft)",
        min_value=0,
        max_value=12000,
        value=400,
        step=50,
        help="Single elevation for the whole tournament; shared by every time of day.",
    )
    t_start = st.date_input("Start Date")

    st.session_state.multi_day = st.checkbox(
        "Multi-day tournament",
        value=st.session_state.multi_day,
    )

    tournament_record = {
        "name": t_name,
        "course": t_course,
        "elevation": int(t_elevation),
    }

    st.markdown("---")
    if st.session_state.multi_day:
        st.session_state.num_days = st.slider(
            "Number of days",
            min_value=1,
            max_value=7,
            value=int(st.session_state.num_days),
        )
        days = []
        for i in range(st.session_state.num_days):
            day_date = pd.Timestamp(t_start) + pd.Timedelta(days=i)
            with st.expander(f"Day {i + 1} • {day_date:%b %d, %Y}", expanded=(i == 0)):
                rec = _condition_inputs(f"day{i}", f"Day {i + 1}")
            rec["date"] = f"{day_date:%Y-%m-%d}"
            days.append(rec)
        tournament_record["days"] = days
    else:
        tournament_record["date"] = f"{pd.Timestamp(t_start):%Y-%m-%d}"
        tournament_record.update(_condition_inputs("single", "Conditions"))


# ------------------------------------------------------------
# Main title & player registration
# ------------------------------------------------------------

st.title("Course Caddy Tournament")
st.caption(
    "Enter a player's baseline conditions and club distances to preview the "
    "weather- and elevation-adjusted yardage card."
)

col_p1, col_p2 = st.columns([2, 2])
with col_p1:
    player_name = st.text_input("Player Name", value="")
    player_email = st.text_input("Email (optional)", value="")
with col_p2:
    st.markdown("**Baseline Conditions**")
    b1, b2, b3 = st.columns(3)
    baseline_temp = b1.number_input(
        "Temp (°F)", value=70, step=1,
        help="Temperature where your club distances were measured.",
    )
    baseline_elev = b2.number_input(
        "Elevation (ft)", value=0, step=50,
        help="Elevation of your home course or range.",
    )
    baseline_hum = b3.number_input(
        "Humidity (%)", value=50, step=1,
        help="Defaults to 50% if you are not sure.",
    )

st.markdown("### Your Bag")
edited = st.data_editor(
    pd.DataFrame(st.session_state.bag),
    num_rows="dynamic",
    use_container_width=True,
    column_config={
        "name": st.column_config.SelectboxColumn("Club", options=list(reg.CLUB_NAMES)),
        "distance": st.column_config.NumberColumn(
            "Distance (yds)",
            min_value=reg.MIN_CLUB_DISTANCE,
            max_value=reg.MAX_CLUB_DISTANCE,
            step=1,
        ),
    },
    key="bag_editor",
)
bag_records = edited.dropna(how="all").to_dict("records")

if st.button("Add Club ➕"):
    try:
        current = [ye.ClubEntry(r["name"], r["distance"]) for r in bag_records]
        new_club = reg.next_club(current)
        st.session_state.bag = bag_records + [
            {"name": new_club.name, "distance": new_club.base_distance_yards}
        ]
        st.rerun()
    except reg.RegistrationError as e:
        st.warning(str(e))

try:
    registration = reg.registration_from_record(
        {
            "playerName": player_name,
            "playerEmail": player_email,
            "baselineTemp": baseline_temp,
            "baselineElevation": baseline_elev,
            "baselineHumidity": baseline_hum,
            "clubs": bag_records,
        }
    )
    tournament = ye.tournament_from_record(tournament_record)
except reg.RegistrationError as e:
    logger.info("Registration rejected on %s: %s", e.field, e)
    st.error(str(e))
    st.stop()
except ye.InvalidInput as e:
    logger.warning("Tournament record rejected: %s", e)
    st.error(f"Tournament conditions are incomplete: {e}")
    st.stop()


# ------------------------------------------------------------
# Tabs
# ------------------------------------------------------------

tab_card, tab_sens, tab_info = st.tabs(["Yardage Card", "Sensitivity", "Info"])

# ============================================================
# YARDAGE CARD TAB
# ============================================================

with tab_card:
    day_indices = ye.card_day_indices(tournament)
    day_index = st.selectbox(
        "Day",
        day_indices,
        format_func=lambda i: f"Day {i + 1}",
        disabled=len(day_indices) == 1,
    )

    card = ye.build_yardage_card(tournament, registration, day_index)
    summary = card["summary"]

    st.subheader(card["tournament"])
    st.caption(card["course"])
    date_label = card["date"] or ""
    if card["day_number"]:
        date_label = f"Day {card['day_number']} • {date_label}"
    st.markdown(f"**{card['player']}** • {date_label}")

    m1, m2, m3 = st.columns(3)
    m1.metric("Temp", f"{summary['min_temp']:.0f}°F - {summary['max_temp']:.0f}°F")
    m2.metric("Humidity", f"{summary['min_humidity']:.0f}% - {summary['max_humidity']:.0f}%")
    m3.metric("Elevation", f"{card['elevation_ft']:.0f} ft")

    df_card = pd.DataFrame(card["rows"])
    df_display = pd.DataFrame({"Club": df_card["club"], "Base": df_card["base"]})
    for label in ye.TIMES_OF_DAY:
        header = f"{label.title()} ({card['header_temps'][label]:.0f}°F)"
        df_display[header] = [
            _cell(v, d) for v, d in zip(df_card[label], df_card[f"{label}_delta"])
        ]
    st.dataframe(df_display, use_container_width=True, hide_index=True)

    st.download_button(
        "Download Card (CSV)",
        data=df_card.to_csv(index=False).encode("utf-8"),
        file_name=f"{card['player'].replace(' ', '_')}_Day{day_index + 1}_Yardages.csv",
        mime="text/csv",
    )

    # Grouped bars: adjusted yardage per club and time of day
    df_long = df_card.melt(
        id_vars=["club"],
        value_vars=list(ye.TIMES_OF_DAY),
        var_name="Time of Day",
        value_name="Yards",
    )
    bars = (
        alt.Chart(df_long)
        .mark_bar()
        .encode(
            x=alt.X("club:N", title="", sort=list(df_card["club"])),
            xOffset=alt.XOffset("Time of Day:N", sort=list(ye.TIMES_OF_DAY)),
            y=alt.Y("Yards:Q", title="Adjusted distance (yds)"),
            color=alt.Color(
                "Time of Day:N",
                sort=list(ye.TIMES_OF_DAY),
                scale=alt.Scale(range=["#f1c40f", "#e67e22", "#8e44ad"]),
            ),
            tooltip=["club", "Time of Day", "Yards"],
        )
        .properties(height=320)
    )
    st.altair_chart(bars, use_container_width=True)


# ============================================================
# SENSITIVITY TAB
# ============================================================

with tab_sens:
    st.subheader("How conditions move one club")

    club_names = [c.name for c in registration.clubs]
    club_idx = st.selectbox(
        "Club",
        range(len(club_names)),
        format_func=lambda i: club_names[i],
    )
    club = registration.clubs[club_idx]
    day = ye.resolve_day_conditions(tournament, day_index)

    # Afternoon is the warmest sample on most days; show it as the headline.
    afternoon = ye.adjusted_distance(club.base_distance_yards, registration.baseline, day.afternoon)
    delta = ye.adjustment_delta(club.base_distance_yards, registration.baseline, day.afternoon)
    bar_color = POSITIVE_COLOR if delta > 0 else NEGATIVE_COLOR if delta < 0 else "gray"

    fig = go.Figure(
        go.Indicator(
            mode="gauge+number+delta",
            value=afternoon,
            title={"text": f"<b>{club.name}: afternoon plays {afternoon} yards</b>", "font": {"size": 18}},
            delta={"reference": club.base_distance_yards, "relative": False, "position": "top"},
            gauge={
                "axis": {"range": [club.base_distance_yards - 30, club.base_distance_yards + 30]},
                "bar": {"color": bar_color},
                "threshold": {
                    "line": {"color": "white", "width": 3},
                    "thickness": 0.8,
                    "value": club.base_distance_yards,
                },
            },
        )
    )
    fig.update_layout(height=280, margin=dict(t=60, b=10, l=10, r=10))
    st.plotly_chart(fig, use_container_width=True)

    # Temperature sweep at the afternoon humidity and course elevation
    temps = np.arange(reg.MIN_BASELINE_TEMP_F, reg.MAX_BASELINE_TEMP_F + 1, 5)
    sweep = pd.DataFrame(
        {
            "Temp (°F)": temps,
            "Yards": [
                ye.adjusted_distance(
                    club.base_distance_yards,
                    registration.baseline,
                    ye.ConditionSet(float(t), day.afternoon.humidity_pct, tournament.elevation_ft),
                )
                for t in temps
            ],
        }
    )
    line = (
        alt.Chart(sweep)
        .mark_line(point=True, color="#3498db")
        .encode(x="Temp (°F):Q", y=alt.Y("Yards:Q", scale=alt.Scale(zero=False)))
        .properties(height=260, title=f"{club.name} across temperatures at {tournament.elevation_ft:.0f} ft")
    )
    st.altair_chart(line, use_container_width=True)


# ============================================================
# INFO TAB
# ============================================================

with tab_info:
    st.subheader("How the adjustment works")
    st.markdown(
        """
        Your club distances are measured at your **baseline** conditions. Each
        yardage on the card starts from that distance and is adjusted, in order:

        1. **Temperature**: +0.2% per °F warmer than your baseline.
        2. **Elevation**: +2% per 1,000 ft above your baseline elevation.
        3. **Humidity**: +1% per 100 points of humidity (a minor effect).

        Each step builds on the previous one, and the result is rounded to the
        nearest yard. The number in parentheses is the change from your
        baseline distance.
        """
    )
