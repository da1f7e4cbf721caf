import os
import time
import streamlit as st
import requests
import pandas as pd
from dotenv import load_dotenv

load_dotenv()

# ── configurable via .env ──
API_BASE = os.getenv("API_BASE", "http://localhost:8000")
ANALYZE_TIMEOUT = int(os.getenv("ANALYZE_TIMEOUT", "300"))

PROVIDERS = ["anthropic", "openai", "gemini"]
STATUS_COLORS = {
    "compliant": "#90EE90",
    "implicit": "#ADD8E6",
    "partial": "#FFD700",
    "non-compliant": "#FFB6C1",
    "not-applicable": "#D3D3D3",
}
STATUS_LABELS = {
    "compliant": "Conforme",
    "implicit": "Implicite",
    "partial": "Partiel",
    "non-compliant": "Non conforme",
    "not-applicable": "Non applicable",
}

st.set_page_config(page_title="ICT Contract Checker", page_icon="📄", layout="wide")
st.title("📄 ICT Contract Checker (DORA / EBA / Arrêté 2014)")

API = st.sidebar.text_input("API URL", API_BASE)
provider = st.sidebar.selectbox("Provider", PROVIDERS)
api_key = st.sidebar.text_input("API key", type="password")
model = st.sidebar.text_input("Model (optional)", "")
critical = st.sidebar.selectbox(
    "Critical or important function?", ["Auto", "Oui", "Non"],
    help="Non: requirements limited to critical functions are marked not applicable.",
)

files = st.file_uploader(
    "Contract documents (contract, annexes, SLA...)", type=["pdf", "txt", "md"], accept_multiple_files=True,
)

if st.button("Analyze", disabled=not (files and api_key)) and files:
    progress = st.progress(0, text="Uploading documents...")
    form = {"provider": provider, "apiKey": api_key}
    if model:
        form["model"] = model
    if critical != "Auto":
        form["criticalFunction"] = "true" if critical == "Oui" else "false"

    progress.progress(20, text=f"Analyzing {len(files)} document(s) against the 35 requirements...")
    try:
        resp = requests.post(
            f"{API}/analyze/files",
            files=[("files", (f.name, f.getvalue())) for f in files],
            data=form,
            timeout=ANALYZE_TIMEOUT,
        )
    except requests.exceptions.Timeout:
        progress.empty()
        st.error("Request timed out. The model may be slow, try increasing ANALYZE_TIMEOUT.")
        st.stop()
    except requests.exceptions.ConnectionError:
        progress.empty()
        st.error("Cannot connect to backend. Is the server running?")
        st.stop()

    progress.progress(100, text="Done!")
    time.sleep(0.3)
    progress.empty()

    if not resp.ok:
        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        st.error(f"Error {resp.status_code}: {detail}")
        st.stop()

    report = resp.json()
    findings = report["findings"]

    col1, col2 = st.columns([1, 3])
    col1.metric("Compliance score", f"{report['overallScore']} / 100")
    if report.get("isPartial"):
        col2.warning("Partial analysis: the model response was truncated, some requirements are missing.")
    st.markdown(report["summary"])

    df = pd.DataFrame([{
        "ID": f.get("requirementId", ""),
        "Requirement": f["requirement"],
        "Criticality": f.get("criticality") or "—",
        "Status": f["status"],
        "Details": f["details"],
    } for f in findings])

    def color(val):
        return f"background-color: {STATUS_COLORS.get(val, '#FFFFFF')}"

    st.dataframe(df.style.map(color, subset=["Status"]), hide_index=True, use_container_width=True)

    recs = [f for f in findings if f.get("recommendation")]
    if recs:
        st.subheader(f"Recommendations ({len(recs)})")
        for f in recs:
            label = STATUS_LABELS.get(f["status"], f["status"])
            with st.expander(f"{f.get('requirementId', '')} {f['requirement']} ({label})"):
                if f.get("reference"):
                    st.caption(f["reference"])
                st.markdown(f["recommendation"])
