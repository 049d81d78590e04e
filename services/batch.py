"""Sequential classification of every extracted product."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from services.classifier import DEFAULT_MODEL, DEFAULT_TIMEOUT, try_classify
from services.hierarchy import hierarchy_to_text
from services.models import (
    UNCLASSIFIED_PATH,
    ClassificationNode,
    ClassifiedProduct,
    Product,
)

ProgressCallback = Callable[[int, int], None]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchSummary:
    total: int
    classified: int
    unclassified: int
    failed: int


def classify_all(
    client: Any,
    products: Sequence[Product],
    hierarchy: Sequence[ClassificationNode],
    *,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
    progress_cb: Optional[ProgressCallback] = None,
    on_failure: Optional[Callable[[Any], None]] = None,
) -> List[ClassifiedProduct]:
    """Classify ``products`` one request at a time, keeping input order.

    A failed request yields the unclassified path for that product only.
    ``progress_cb(done, total)`` is called after each product and
    ``on_failure(result)`` for each failed one.
    """

    total = len(products)
    if not total:
        return []

    hierarchy_text = hierarchy_to_text(hierarchy)
    results: List[ClassifiedProduct] = []
    failed = 0
    for done, product in enumerate(products, start=1):
        outcome = try_classify(
            client,
            product.description,
            hierarchy,
            model=model,
            timeout=timeout,
            hierarchy_text=hierarchy_text,
        )
        if outcome.error is not None:
            path = UNCLASSIFIED_PATH
            failed += 1
            if on_failure is not None:
                on_failure(outcome)
        else:
            path = outcome.path
        results.append(ClassifiedProduct(description=product.description, classification=path))
        if progress_cb is not None:
            progress_cb(done, total)

    summary = summarize(results, failed=failed)
    logger.info(
        "Classified %d product(s): %d classified, %d unclassified (%d failed)",
        summary.total,
        summary.classified,
        summary.unclassified,
        summary.failed,
    )
    return results


def summarize(
    results: Sequence[ClassifiedProduct], *, failed: int = 0
) -> BatchSummary:
    unclassified = sum(1 for item in results if item.classification.is_unclassified)
    return BatchSummary(
        total=len(results),
        classified=len(results) - unclassified,
        unclassified=unclassified,
        failed=failed,
    )
