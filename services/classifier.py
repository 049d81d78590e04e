"""LLM-backed classification of one product description into the hierarchy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from services.hierarchy import hierarchy_to_text
from services.models import (
    UNCLASSIFIED_CODE,
    UNCLASSIFIED_NAME,
    UNCLASSIFIED_PATH,
    Category,
    ClassificationNode,
    ClassificationPath,
)
from utils.json_parse import extract_json_object, short_preview_of

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT = 60

RESPONSE_FIELDS: tuple[str, ...] = (
    "secteur_code",
    "secteur_name",
    "rayon_code",
    "rayon_name",
    "famille_code",
    "famille_name",
    "sous_famille_code",
    "sous_famille_name",
)

RESPONSE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {field: {"type": "string"} for field in RESPONSE_FIELDS},
    "required": list(RESPONSE_FIELDS),
    "additionalProperties": False,
}

RESPONSE_FORMAT: dict[str, object] = {
    "type": "json_schema",
    "json_schema": {
        "name": "classification_path",
        "strict": True,
        "schema": RESPONSE_SCHEMA,
    },
}

SYSTEM_PROMPT = (
    "You are an expert product classifier for a supermarket. "
    "You answer with a single JSON object and nothing else."
)

PROMPT_TEMPLATE = """
Your task is to classify a given product description into a predefined hierarchical structure.

This is the complete classification hierarchy:
--- HIERARCHY START ---
{hierarchy}
--- HIERARCHY END ---

Rules:
1. Analyze the product description: "{description}".
2. Find the most appropriate complete path from the hierarchy: Secteur > Rayon > Famille > Sous-famille.
3. You MUST return the full path, including codes and names for all four levels.
4. If no suitable classification can be found with high confidence, you MUST return "{unclassified_name}" for all names and "{unclassified_code}" for all codes.
5. Respond ONLY with the JSON object matching the provided schema. Do not add any extra text or explanations.
"""

_LEVEL_FIELDS: tuple[tuple[str, str], ...] = (
    ("secteur_code", "secteur_name"),
    ("rayon_code", "rayon_name"),
    ("famille_code", "famille_name"),
    ("sous_famille_code", "sous_famille_name"),
)

logger = logging.getLogger(__name__)


class ClassificationError(RuntimeError):
    """A single product could not be classified.

    ``reason`` is ``"request"`` for transport failures, ``"response"`` when
    no JSON object could be read and ``"schema"`` when the object does not
    describe one complete path.
    """

    def __init__(self, message: str, *, reason: str, raw: str = "") -> None:
        super().__init__(message)
        self.reason = reason
        self.raw = raw


@dataclass(frozen=True)
class ClassificationResult:
    description: str
    path: Optional[ClassificationPath] = None
    error: Optional[ClassificationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_prompt(description: str, hierarchy_text: str) -> str:
    return PROMPT_TEMPLATE.format(
        hierarchy=hierarchy_text,
        description=description,
        unclassified_name=UNCLASSIFIED_NAME,
        unclassified_code=UNCLASSIFIED_CODE,
    ).strip()


def _extract_response_content(response: object) -> str:
    if isinstance(response, Mapping):
        choices = response.get("choices")
        if isinstance(choices, Sequence) and choices:
            first = choices[0]
            message = first.get("message") if isinstance(first, Mapping) else None
            if isinstance(message, Mapping):
                return str(message.get("content") or "")
        return str(response.get("content") or "")

    choices = getattr(response, "choices", None)
    if isinstance(choices, Sequence) and choices:
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if content:
            return str(content)
        refusal = getattr(message, "refusal", None)
        if refusal:
            raise ClassificationError(f"Model refused: {refusal}", reason="response")
    return ""


def parse_classification(payload: object) -> ClassificationPath:
    """Turn the model's 8-field object into a :class:`ClassificationPath`.

    ``payload`` may be the raw response text or an already decoded mapping.
    Raises :class:`ClassificationError` for anything that is not one complete
    path or the complete unclassified marker.
    """

    raw = payload if isinstance(payload, str) else ""
    data = payload if isinstance(payload, Mapping) else extract_json_object(payload)
    if data is None:
        raise ClassificationError(
            f"Response is not a JSON object: {short_preview_of(payload)}",
            reason="response",
            raw=raw,
        )

    missing = [field for field in RESPONSE_FIELDS if field not in data]
    if missing:
        raise ClassificationError(
            f"Response is missing field(s): {', '.join(missing)}", reason="schema", raw=raw
        )

    values: dict[str, str] = {}
    for field in RESPONSE_FIELDS:
        value = data[field]
        if not isinstance(value, str) or not value.strip():
            raise ClassificationError(
                f"Field {field} must be a non-empty string, got {value!r}",
                reason="schema",
                raw=raw,
            )
        values[field] = value.strip()

    unclassified_levels = [values[code] == UNCLASSIFIED_CODE for code, _ in _LEVEL_FIELDS]
    if all(unclassified_levels):
        return UNCLASSIFIED_PATH
    if any(unclassified_levels):
        raise ClassificationError(
            "Response mixes unclassified and classified levels", reason="schema", raw=raw
        )

    secteur, rayon, famille, sous_famille = (
        Category(values[code], values[name]) for code, name in _LEVEL_FIELDS
    )
    return ClassificationPath(
        secteur=secteur, rayon=rayon, famille=famille, sous_famille=sous_famille
    )


def request_classification(
    client: Any,
    prompt: str,
    *,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Send one structured-output chat completion and return its text."""

    try:
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            response_format=RESPONSE_FORMAT,
            temperature=0,
            timeout=timeout,
        )
    except Exception as exc:
        raise ClassificationError(f"Classification request failed: {exc}", reason="request") from exc

    content = _extract_response_content(response)
    if not content.strip():
        raise ClassificationError("Classification response has no content", reason="response")
    return content


def try_classify(
    client: Any,
    description: str,
    hierarchy: Sequence[ClassificationNode],
    *,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
    hierarchy_text: Optional[str] = None,
) -> ClassificationResult:
    """Classify one description, reporting failures as a value."""

    try:
        if hierarchy_text is None:
            hierarchy_text = hierarchy_to_text(hierarchy)
        prompt = build_prompt(description, hierarchy_text)
        raw = request_classification(client, prompt, model=model, timeout=timeout)
        path = parse_classification(raw)
    except ClassificationError as exc:
        error = exc
    except Exception as exc:
        error = ClassificationError(f"Classification failed: {exc}", reason="response")
    else:
        return ClassificationResult(description=description, path=path)

    logger.warning(
        "Failed to classify product %r (%s): %s", description, error.reason, error
    )
    return ClassificationResult(description=description, error=error)


def classify_product(
    client: Any,
    description: str,
    hierarchy: Sequence[ClassificationNode],
    *,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
) -> ClassificationPath:
    """Return the product's path, or the unclassified path when anything fails."""

    result = try_classify(client, description, hierarchy, model=model, timeout=timeout)
    if result.error is not None:
        return UNCLASSIFIED_PATH
    return result.path
