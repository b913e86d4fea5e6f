from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..models.raw_row import NamedRow
from .errors import IngestionError

"""AI-JSON ingestion.

Free text (an email, a copy of a PDF, a hand-written list) is sent to an
external extractor that answers with JSON. Extraction itself is a black box:
this module only builds the prompt, calls whatever callable it is given and
checks the answer's shape.

Accepted answer: a JSON array of objects (a single object is promoted to a
one-element list). Known fields must be strings, numbers or null; unknown
fields are ignored and missing fields surface later as validation errors.
Anything else fails the whole ingestion with IngestionError.
"""

__all__ = [
    "AI_FIELDS",
    "RESPONSE_SCHEMA",
    "Extractor",
    "build_extraction_prompt",
    "parse_ai_response",
    "extract_with_ai",
]

logger = logging.getLogger(__name__)

AI_FIELDS = (
    "supplier_name",
    "invoice_number",
    "issue_date",
    "due_date",
    "subtotal",
    "tax",
    "total",
)

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {name: {"type": ["string", "number", "null"]} for name in AI_FIELDS},
    },
}

# prompt -> raw model answer
Extractor = Callable[[str], str]

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", re.DOTALL)

_PROMPT_TEMPLATE = """Extract purchase invoice details from the following raw text. The text could be an email, a copy-paste from a PDF, or a manual list.
Return ONLY a JSON array of objects, each representing one invoice with these fields:
- supplier_name: string
- invoice_number: string
- issue_date: string (YYYY-MM-DD or DD/MM/YYYY)
- due_date: string (YYYY-MM-DD or DD/MM/YYYY)
- subtotal: number (base imponible)
- tax: number (IVA)
- total: number

Text to analyze:
---
{text}
---"""


def build_extraction_prompt(text: str) -> str:
    return _PROMPT_TEMPLATE.format(text=text.strip())


def _strip_fence(text: str) -> str:
    m = _FENCE_RE.match(text)
    return m.group(1).strip() if m else text


def parse_ai_response(payload: str | bytes | list[Any] | dict[str, Any] | None) -> list[NamedRow]:
    """Validate extractor output and wrap each object in a NamedRow.

    Raises:
        IngestionError: unparseable JSON or wrong shape
    """
    if payload is None:
        return []
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        text = _strip_fence(payload.strip())
        if not text:
            return []
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise IngestionError(f"extractor returned invalid JSON: {e}") from e
    else:
        data = payload

    if isinstance(data, dict):
        data = [data]
    try:
        jsonschema.validate(data, RESPONSE_SCHEMA)
    except ValidationError as e:
        raise IngestionError(f"extractor returned unexpected shape: {e.message}") from e

    return [NamedRow(fields=dict(item)) for item in data]


def extract_with_ai(text: str, extractor: Extractor) -> list[NamedRow]:
    """Run the external extractor on free text and parse its answer.

    Blank text does not call the extractor and yields no rows.

    Raises:
        IngestionError: extractor failure or invalid answer
    """
    if not text or not text.strip():
        return []
    prompt = build_extraction_prompt(text)
    try:
        answer = extractor(prompt)
    except Exception as e:
        raise IngestionError(f"AI extraction failed: {e}") from e
    logger.debug("extractor answered %d chars", len(answer or ""))
    return parse_ai_response(answer)
