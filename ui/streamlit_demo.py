import uuid
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st
from dotenv import load_dotenv

load_dotenv()

st.set_page_config(page_title="Medication Tracker Demo", layout="wide")

# ---------------------------
# Config
# ---------------------------
DEFAULT_API_BASE = "http://127.0.0.1:8000"
API_BASE = st.sidebar.text_input("API Base URL", value=DEFAULT_API_BASE)

WEEK_HEADER = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# ---------------------------
# Helpers (API)
# ---------------------------
def api_post(path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    url = f"{API_BASE}{path}"
    r = requests.post(url, json=payload, timeout=120)
    if r.status_code >= 400:
        raise RuntimeError(f"{r.status_code} {r.text}")
    return r.json()

def api_get(path: str, params: Optional[Dict[str, Any]] = None) -> Any:
    url = f"{API_BASE}{path}"
    r = requests.get(url, params=params or {}, timeout=20)
    if r.status_code >= 400:
        raise RuntimeError(f"{r.status_code} {r.text}")
    return r.json()

def dose_label(name: str, occ: Dict[str, Any]) -> str:
    unit = occ.get("doseUnit") or ""
    amount = f"{occ.get('doseAmount')} {unit}".strip()
    if occ.get("asNeeded"):
        return f"{name} ({amount}, as needed, max {occ.get('max')})"
    return f"{name} {', '.join(occ.get('times') or [])} ({amount})"

def month_frame(days: List[Dict[str, Any]]) -> pd.DataFrame:
    """Sunday-first grid -> week rows x weekday columns."""
    cells: List[str] = []
    for d in days:
        day_num = d["date"][-2:].lstrip("0")
        if not d["isCurrentMonth"]:
            cells.append(f"({day_num})")
            continue
        lines = [day_num] + [dose_label(x["medication"], x["occurrence"]) for x in d["doses"]]
        cells.append("\n".join(lines))

    while len(cells) % 7:
        cells.append("")
    rows = [cells[i : i + 7] for i in range(0, len(cells), 7)]
    return pd.DataFrame(rows, columns=WEEK_HEADER)

# ---------------------------
# Session state
# ---------------------------
if "session_id" not in st.session_state:
    st.session_state.session_id = "sess_" + uuid.uuid4().hex[:12]
if "messages" not in st.session_state:
    st.session_state.messages = [{
        "role": "assistant",
        "text": "Hi! I can help you manage your medication schedule. What medications are you taking?",
    }]
if "medication_data" not in st.session_state:
    st.session_state.medication_data = {"medicationStatements": []}
if "regimen_start" not in st.session_state:
    # fixed once per session; every calendar cell is projected against it
    st.session_state.regimen_start = date.today()

# ---------------------------
# UI
# ---------------------------
st.title("💊 Medication Tracker")

if st.sidebar.button("🧹 Reset Session"):
    for k in ("session_id", "messages", "medication_data", "regimen_start"):
        st.session_state.pop(k, None)
    st.rerun()

st.session_state.regimen_start = st.sidebar.date_input("Regimen start", value=st.session_state.regimen_start)
st.sidebar.code(st.session_state.session_id)

col_chat, col_cal = st.columns([1, 1.6])

with col_chat:
    st.subheader("Chat")
    for m in st.session_state.messages:
        with st.chat_message(m["role"]):
            st.write(m["text"])

    prompt = st.chat_input("e.g. Prednisone 10mg once daily for 7 days then 5mg once daily")
    if prompt:
        st.session_state.messages.append({"role": "user", "text": prompt})
        try:
            resp = api_post("/tracker/messages", {"sessionId": st.session_state.session_id, "text": prompt})
            st.session_state.medication_data = resp["medicationData"]
            st.session_state.messages.append({"role": "assistant", "text": resp["reply"]})
            names = [s["medication"] for s in resp["medicationData"].get("medicationStatements", [])]
            if resp.get("ok") and names:
                st.toast(f"Updated tracker medications: {', '.join(names)}")
        except Exception as e:
            st.session_state.messages.append({"role": "assistant", "text": f"Error: {e}"})
        st.rerun()

with col_cal:
    st.subheader("Calendar")
    today = date.today()
    c1, c2 = st.columns(2)
    year = c1.number_input("Year", min_value=1, max_value=9999, value=today.year, step=1)
    month = c2.number_input("Month", min_value=1, max_value=12, value=today.month, step=1)

    meds = st.session_state.medication_data.get("medicationStatements", [])
    if meds:
        try:
            cal = api_post("/schedule/calendar", {
                "medications": meds,
                "year": int(year),
                "month": int(month),
                "regimenStart": st.session_state.regimen_start.isoformat(),
            })
            st.dataframe(month_frame(cal["days"]), use_container_width=True, height=420)
        except Exception as e:
            st.error(str(e))
    else:
        st.info("No medications tracked yet. Describe them in the chat.")

# ---------------------------
# Medication cards
# ---------------------------
st.divider()
st.subheader("Medications")

try:
    cards = api_get("/tracker/cards", {"session_id": st.session_state.session_id}) if meds else []
except Exception as e:
    st.error(str(e))
    cards = []

for card in cards:
    with st.container(border=True):
        title = card["medication"]
        if card.get("form"):
            title += f" · {card['form']}"
        st.markdown(f"**{title}**")
        st.caption(card["strength"] + ("" if card["strengthConfirmed"] else " ⚠️"))
        if card["missingTimingInfo"]:
            st.warning("Some timing information is missing")
        for ph in card["phases"]:
            mods = " | ".join(ph["modifiers"])
            st.write(f"{ph['order']}. {ph['dose']} · {ph['period']}" + (f" · {mods}" if mods else ""))
            if ph.get("rawText"):
                st.caption(ph["rawText"])
