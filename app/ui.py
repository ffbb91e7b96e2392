# Run from project root: streamlit run app/ui.py
# UI talks to backend API (POST /chat, POST /translate, POST /mcp/tools/system_stats).

import base64
import os
import sys
from pathlib import Path

# Ensure project root is on path (Streamlit may run with cwd != project root)
_root_from_file = Path(__file__).resolve().parent.parent
_cwd = os.getcwd()
for _root in (_root_from_file, _cwd):
    _root = str(_root)
    if _root not in sys.path:
        sys.path.insert(0, _root)

import requests
import streamlit as st

from app.core.config import API_BASE

LANGUAGES = {"English": "en", "हिंदी": "hi", "मराठी": "mr"}
CONFIDENCE_LABELS = {"high": "🟢 high", "medium": "🟡 medium", "low": "🔴 low"}

st.title("Krishi Mitra 🌾")
st.caption("Ask about crops, weather, pests, mandi prices and soil, in English, Hindi or Marathi.")

# Knowledge base overview (on every render)
try:
    r = requests.post(f"{API_BASE}/mcp/tools/system_stats", json={}, timeout=10)
    if r.ok:
        stats = r.json()
        st.caption(
            f"Knowledge base: {stats.get('total_documents', 0)} documents from "
            f"{stats.get('source_count', 0)} sources"
        )
    else:
        st.caption("Could not load knowledge base status.")
except requests.RequestException:
    st.caption("Backend not reachable. Start the API first.")

language_label = st.selectbox("Reply language", list(LANGUAGES), key="language")
language = LANGUAGES[language_label]

photo = st.file_uploader("Crop photo (optional)", type=["jpg", "jpeg", "png"], key="photo")

st.divider()

if "messages" not in st.session_state:
    st.session_state.messages = []
if st.button("New chat", key="new_chat"):
    st.session_state.messages = []
    st.rerun()


def _render_meta(msg: dict) -> None:
    if msg.get("sources"):
        st.caption("Sources: " + ", ".join(msg["sources"]))
    if msg.get("confidence"):
        st.caption(f"Confidence: {CONFIDENCE_LABELS.get(msg['confidence'], msg['confidence'])}")


for i, msg in enumerate(st.session_state.messages):
    with st.chat_message(msg["role"]):
        st.markdown(msg["content"])
        if msg["role"] == "assistant":
            _render_meta(msg)
            target = "en" if language != "en" else "hi"
            if st.button(f"Translate ({target})", key=f"translate_{i}"):
                try:
                    r = requests.post(
                        f"{API_BASE}/translate",
                        json={"text": msg["content"], "target_lang": target},
                        timeout=120,
                    )
                    if r.ok:
                        st.info(r.json().get("translated_text", ""))
                    else:
                        st.error(f"Translation failed: {r.status_code}: {r.text[:200]}")
                except requests.RequestException as e:
                    st.error(f"Request failed: {e}")

# If we just submitted a query, show "Thinking..." while waiting for the answer
if st.session_state.get("pending_query"):
    query = st.session_state.pending_query
    payload = {"query": query, "language": language}
    if photo is not None:
        photo.seek(0)
        encoded = base64.b64encode(photo.read()).decode("ascii")
        payload["image"] = f"data:{photo.type or 'image/jpeg'};base64,{encoded}"
    with st.chat_message("assistant"):
        placeholder = st.empty()
        placeholder.caption("Thinking...")
        reply: dict = {"role": "assistant"}
        try:
            # Backend may poll the model for up to ~90s
            r = requests.post(f"{API_BASE}/chat", json=payload, timeout=120)
            if r.ok:
                data = r.json()
                reply.update(
                    content=data.get("answer") or "No answer.",
                    sources=data.get("sources") or [],
                    confidence=data.get("confidence"),
                )
            else:
                try:
                    error = r.json().get("error") or r.text[:200]
                except ValueError:
                    error = r.text[:200]
                reply["content"] = f"Error: {r.status_code}: {error}"
        except requests.RequestException as e:
            reply["content"] = f"Connection failed: {e}"
        placeholder.markdown(reply["content"])
        _render_meta(reply)
        st.session_state.messages.append(reply)
    del st.session_state["pending_query"]
    st.rerun()

# New message from user: show it immediately, then rerun so "Thinking..." appears
if prompt := st.chat_input("Ask a farming question / खेती से जुड़ा सवाल पूछें / शेतीविषयी प्रश्न विचारा"):
    st.session_state.messages.append({"role": "user", "content": prompt})
    st.session_state.pending_query = prompt
    st.rerun()
