from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from collections.abc import Sequence
from dataclasses import asdict

import openai
import pandas as pd
import streamlit as st

from helpers.eta import ETAEstimator
from services.batch import classify_all, summarize
from services.classifier import ClassificationResult
from services.config import (
    ConfigError,
    Settings,
    build_openai_client,
    configure_logging,
    load_settings,
)
from services.hierarchy import HierarchyError, default_hierarchy, load_hierarchy_csv
from services.models import LEVEL_NAMES, ClassificationNode, ClassifiedProduct, Product
from services.session import (
    ClassificationSession,
    SessionPhase,
    SessionStateError,
    export_results,
    process_upload,
)
from services.tabular import XLSX_MIME, ExcelCodec, TabularCodecError, results_frame
from utils.df_sanitize import rows_preview
from utils.json_parse import short_preview_of

configure_logging()
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="ClassifyBot",
    page_icon="🗂️",
    layout="wide",
)

st.session_state.setdefault("uploader_key", 0)
st.session_state.setdefault("_trace_events", [])


def trace(event: dict):
    st.session_state["_trace_events"].append(event)
    logger.debug("TRACE %s", event)


@st.cache_resource(show_spinner=False)
def _load_hierarchy(path: str | None) -> tuple[ClassificationNode, ...]:
    if path:
        return load_hierarchy_csv(path)
    return default_hierarchy()


@st.cache_resource(show_spinner=False)
def _openai_client(settings: Settings) -> openai.OpenAI:
    return build_openai_client(settings)


def _get_session() -> ClassificationSession:
    session = st.session_state.get("classification_session")
    if not isinstance(session, ClassificationSession):
        session = ClassificationSession()
        st.session_state["classification_session"] = session
    elif session.is_loading:
        # a previous run was interrupted mid-batch
        session.reset()
    return session


def _reset(session: ClassificationSession) -> None:
    session.reset()
    st.session_state["uploader_key"] += 1
    st.session_state.pop("export_payload", None)


def _trace_failure(result: ClassificationResult) -> None:
    trace(
        {
            "where": "classify:failed",
            "description": short_preview_of(result.description),
            "reason": getattr(result.error, "reason", None),
            "error": short_preview_of(str(result.error), max_len=300),
        }
    )


def _make_classifier(client, hierarchy: Sequence[ClassificationNode], settings: Settings):
    def _classify(products: Sequence[Product]) -> list[ClassifiedProduct]:
        eta = ETAEstimator(len(products))
        try:
            return classify_all(
                client,
                products,
                hierarchy,
                model=settings.model,
                timeout=settings.timeout,
                progress_cb=eta.update,
                on_failure=_trace_failure,
            )
        finally:
            eta.close()

    return _classify


def _display_frame(results: Sequence[ClassifiedProduct]) -> pd.DataFrame:
    frame = results_frame(results)
    columns = ["Description"] + [f"{label} Nom" for label in LEVEL_NAMES]
    display = frame[columns].copy()
    display.columns = ["Product Description", *LEVEL_NAMES]
    return display


def _render_uploader(session: ClassificationSession, codec: ExcelCodec, classify) -> None:
    uploaded = st.file_uploader(
        "Drag and drop your Excel file here",
        type=["xlsx", "xls"],
        key=f"uploader_{st.session_state['uploader_key']}",
        help="The first sheet is read; the description column is detected automatically.",
    )
    if uploaded is None or session.phase is not SessionPhase.IDLE:
        return

    with st.spinner(f"Classifying products from {uploaded.name}…"):
        process_upload(
            session,
            uploaded.getvalue(),
            uploaded.name,
            codec=codec,
            classify=classify,
        )
    if session.phase is SessionPhase.RESULTS:
        summary = summarize(session.classified_products)
        trace({"where": "batch:done", "file": session.file_name, **asdict(summary)})
    st.rerun()


def _render_error(session: ClassificationSession) -> None:
    st.error(f"**An Error Occurred**\n\n{session.error}")
    if st.button("Try Again", type="primary"):
        _reset(session)
        st.rerun()


def _render_results(session: ClassificationSession, codec: ExcelCodec) -> None:
    results = session.classified_products
    summary = summarize(results)

    st.subheader("Classification Results")
    st.caption(
        f"Found and classified **{len(results)}** products from *{session.file_name}*."
    )
    col_total, col_ok, col_na = st.columns(3)
    col_total.metric("Products", summary.total)
    col_ok.metric("Classified", summary.classified)
    col_na.metric("Non classifié", summary.unclassified)

    payload = st.session_state.get("export_payload")
    if payload is None:
        try:
            payload = export_results(session, codec)
        except (TabularCodecError, SessionStateError) as exc:
            st.error(f"Export failed: {exc}")
            payload = None
        else:
            st.session_state["export_payload"] = payload

    col_new, col_download, _ = st.columns([1, 1, 4])
    with col_new:
        if st.button("⬅️ New File"):
            _reset(session)
            st.rerun()
    with col_download:
        if payload is not None:
            file_name, data = payload
            st.download_button(
                "⬇️ Download Excel",
                data=data,
                file_name=file_name,
                mime=XLSX_MIME,
                type="primary",
            )

    st.dataframe(_display_frame(results), use_container_width=True, hide_index=True)

    if session.rows:
        with st.expander("Uploaded sheet preview", expanded=False):
            st.dataframe(rows_preview(session.rows), use_container_width=True)


st.title("🗂️ ClassifyBot")
st.caption(
    "Upload an Excel file with product descriptions, and let AI provide a detailed "
    "hierarchical classification (Secteur > Rayon > Famille > Sous-Famille)."
)

try:
    settings = load_settings(st.secrets)
except ConfigError as exc:
    logger.error("Configuration error: %s", exc)
    st.error(f"Configuration error: {exc}")
    st.stop()

try:
    hierarchy = _load_hierarchy(settings.hierarchy_path)
except (HierarchyError, OSError) as exc:
    logger.error("Hierarchy could not be loaded: %s", exc)
    st.error(f"Classification hierarchy could not be loaded: {exc}")
    st.stop()

try:
    client = _openai_client(settings)
except ConfigError as exc:
    st.error(str(exc))
    st.stop()

codec = ExcelCodec()
session = _get_session()

if session.phase is SessionPhase.ERROR:
    _render_error(session)
elif session.phase is SessionPhase.RESULTS and session.classified_products:
    _render_results(session, codec)
else:
    _render_uploader(session, codec, _make_classifier(client, hierarchy, settings))

with st.expander("🧪 Debug trace", expanded=False):
    st.json(st.session_state["_trace_events"][-500:])

st.caption(f"Powered by Streamlit and OpenAI · model `{settings.model}` · {len(hierarchy)} categories")
