"""Upload session state machine driving the Streamlit page."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from services.extractor import NoDescriptionsError, extract_products
from services.models import ClassifiedProduct, Product
from services.tabular import TabularCodec, TabularCodecError, export_file_name, to_export_rows

ClassifyFn = Callable[[Sequence[Product]], List[ClassifiedProduct]]

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred during file processing."

logger = logging.getLogger(__name__)


class SessionPhase(str, enum.Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    CLASSIFYING = "classifying"
    RESULTS = "results"
    ERROR = "error"


_TRANSITIONS: dict[SessionPhase, frozenset[SessionPhase]] = {
    SessionPhase.IDLE: frozenset({SessionPhase.UPLOADING}),
    SessionPhase.UPLOADING: frozenset({SessionPhase.CLASSIFYING, SessionPhase.ERROR}),
    SessionPhase.CLASSIFYING: frozenset({SessionPhase.RESULTS, SessionPhase.ERROR}),
    SessionPhase.RESULTS: frozenset({SessionPhase.UPLOADING}),
    SessionPhase.ERROR: frozenset({SessionPhase.UPLOADING}),
}


class SessionStateError(RuntimeError):
    """Raised on a transition the session does not allow."""


@dataclass
class ClassificationSession:
    """State of one upload: phase, file name, products, results and error.

    Results are replaced wholesale; :meth:`reset` returns to ``IDLE`` from
    any phase.
    """

    phase: SessionPhase = SessionPhase.IDLE
    file_name: str = ""
    error: Optional[str] = None
    rows: Tuple[Mapping[str, object], ...] = ()
    products: Tuple[Product, ...] = ()
    classified_products: Tuple[ClassifiedProduct, ...] = ()

    @property
    def is_loading(self) -> bool:
        return self.phase in (SessionPhase.UPLOADING, SessionPhase.CLASSIFYING)

    def _move(self, target: SessionPhase) -> None:
        if target not in _TRANSITIONS[self.phase]:
            raise SessionStateError(f"Cannot go from {self.phase.value} to {target.value}")
        logger.debug("Session %s -> %s", self.phase.value, target.value)
        self.phase = target

    def start_upload(self, file_name: str) -> None:
        self._move(SessionPhase.UPLOADING)
        self.file_name = file_name
        self.error = None
        self.rows = ()
        self.products = ()
        self.classified_products = ()

    def begin_classification(self, products: Sequence[Product]) -> None:
        self._move(SessionPhase.CLASSIFYING)
        self.products = tuple(products)

    def complete(self, results: Sequence[ClassifiedProduct]) -> None:
        self._move(SessionPhase.RESULTS)
        self.classified_products = tuple(results)

    def fail(self, message: str) -> None:
        self._move(SessionPhase.ERROR)
        self.error = message or UNKNOWN_ERROR_MESSAGE

    def reset(self) -> None:
        self.phase = SessionPhase.IDLE
        self.file_name = ""
        self.error = None
        self.rows = ()
        self.products = ()
        self.classified_products = ()


def process_upload(
    session: ClassificationSession,
    data: bytes,
    file_name: str,
    *,
    codec: TabularCodec,
    classify: ClassifyFn,
) -> ClassificationSession:
    """Parse, extract and classify one uploaded workbook.

    Unreadable files and files without any description end in the ``ERROR``
    phase before any classification request is made.
    """

    session.start_upload(file_name)
    try:
        session.rows = tuple(codec.parse(data))
        products = extract_products(session.rows)
        if not products:
            raise NoDescriptionsError()
    except (TabularCodecError, NoDescriptionsError) as exc:
        logger.warning("Upload %s rejected: %s", file_name, exc)
        session.fail(str(exc))
        return session

    logger.info("Extracted %d product(s) from %s", len(products), file_name)
    session.begin_classification(products)
    try:
        results = classify(session.products)
    except Exception as exc:
        logger.exception("Classification of %s aborted", file_name)
        session.fail(str(exc))
        return session

    session.complete(results)
    return session


def export_results(session: ClassificationSession, codec: TabularCodec) -> tuple[str, bytes]:
    if session.phase is not SessionPhase.RESULTS or not session.classified_products:
        raise SessionStateError("There are no classification results to export")
    payload = codec.serialize(to_export_rows(session.classified_products))
    return export_file_name(session.file_name), payload
