import logging
from typing import Optional
import streamlit as st
from walk_tracker_app.config import get_settings
from walk_tracker_app.metrics import calculate_weight_loss_date, format_date
from walk_tracker_app.models import Gender, UserProfile
from walk_tracker_app.storage import get_user_profile, save_user_profile
from walk_tracker_app.utils import flash, pop_flash

# --- Streamlit config must be first ---
st.set_page_config(page_title="Standing Desk Walk Tracker", page_icon="🚶", layout="wide")

logging.basicConfig(level=get_settings().log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

profile = get_user_profile()

GENDERS = [g.value for g in Gender]


def profile_form(initial: Optional[UserProfile] = None) -> None:
    """Create or edit the single profile; target date is derived on save."""
    with st.form("profile_form"):
        c1, c2 = st.columns(2)
        with c1:
            height = st.number_input("Height (inches)", min_value=36.0, max_value=96.0, step=0.5,
                                     value=float(initial.height) if initial else 60.0)
            weight = st.number_input("Current weight (lbs)", min_value=50.0, max_value=500.0, step=0.5,
                                     value=float(initial.weight) if initial else 265.0)
            age = st.number_input("Age", min_value=18, max_value=100, step=1,
                                  value=int(initial.age) if initial else 32)
        with c2:
            gender = st.selectbox("Gender", GENDERS,
                                  index=GENDERS.index(initial.gender.value) if initial else GENDERS.index("female"))
            target = st.number_input("Target weight (lbs)", min_value=50.0, max_value=500.0, step=0.5,
                                     value=float(initial.target_weight) if initial else 245.0)
            weekly = st.number_input("Weekly weight loss goal (lbs)", min_value=0.5, max_value=2.0, step=0.1,
                                     value=float(initial.weekly_weight_loss_goal) if initial else 2.0)

        if st.form_submit_button("Save profile"):
            if target >= weight:
                st.error("Target weight must be below your current weight.")
                return
            saved = save_user_profile(UserProfile(
                id=initial.id if initial else None,
                height=height,
                weight=weight,
                age=int(age),
                gender=Gender(gender),
                target_weight=target,
                weekly_weight_loss_goal=weekly,
                target_date=calculate_weight_loss_date(weight, target, weekly),
            ))
            flash(st.session_state, f"Profile saved. Projected target date: {format_date(saved.target_date)}")
            st.rerun()


# --- First run: profile setup only ---
if profile is None:
    st.title("🚶 Welcome to Standing Desk Walk Tracker")
    st.write("Set up your profile to start logging walks and weigh-ins.")
    profile_form()
    st.stop()

# --- Home content ---
st.title("🚶 Standing Desk Walk Tracker")
st.write("Use the pages in the left sidebar to log walks and weight and to see your progress.")

message = pop_flash(st.session_state)
if message:
    st.success(message)

st.subheader("Your goal")
c1, c2, c3 = st.columns(3)
c1.metric("Target weight", f"{profile.target_weight:g} lbs")
c2.metric("Target date", format_date(profile.target_date))
c3.metric("Weekly goal", f"{profile.weekly_weight_loss_goal:g} lbs/week")

with st.expander("Edit profile", expanded=False):
    profile_form(profile)

st.caption(f"All data stays on your machine (SQLite at {get_settings().db_path}).")
