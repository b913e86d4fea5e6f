from __future__ import annotations

import json
from unittest.mock import Mock

import pytest

from purchase_import.ingest.ai_json import (
    AI_FIELDS,
    build_extraction_prompt,
    extract_with_ai,
    parse_ai_response,
)
from purchase_import.ingest.errors import IngestionError
from purchase_import.models.raw_row import NamedRow

ANSWER = [
    {
        "supplier_name": "Acme SL",
        "invoice_number": "F-001",
        "issue_date": "2024-01-15",
        "due_date": "2024-02-15",
        "subtotal": 100,
        "tax": 21,
        "total": 121,
    },
    {"supplier_name": "Proveedor SL", "invoice_number": "F-002", "total": "60,50"},
]


def test_parse_list_of_objects():
    rows = parse_ai_response(json.dumps(ANSWER))
    assert len(rows) == 2
    assert all(isinstance(r, NamedRow) for r in rows)
    assert rows[0].fields["invoice_number"] == "F-001"
    assert rows[1].fields["total"] == "60,50"


def test_single_object_is_promoted_to_list():
    rows = parse_ai_response(json.dumps(ANSWER[0]))
    assert len(rows) == 1
    assert parse_ai_response(ANSWER[0])[0].fields["total"] == 121


def test_already_decoded_payload_and_bytes():
    assert len(parse_ai_response(ANSWER)) == 2
    assert len(parse_ai_response(json.dumps(ANSWER).encode("utf-8"))) == 2


def test_markdown_fence_is_removed():
    text = "```json\n" + json.dumps(ANSWER) + "\n```"
    assert len(parse_ai_response(text)) == 2


def test_empty_answer_yields_no_rows():
    assert parse_ai_response("") == []
    assert parse_ai_response("   ") == []
    assert parse_ai_response(None) == []
    assert parse_ai_response("[]") == []


def test_extra_and_missing_fields_are_accepted():
    rows = parse_ai_response('[{"notes": ["x"], "currency": "EUR"}, {}]')
    assert len(rows) == 2


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[{\"total\": 1,}]",
        "\"just a string\"",
        "42",
        "[1, 2]",
        "[{\"total\": {\"amount\": 1}}]",
        "[{\"invoice_number\": [\"F-1\"]}]",
    ],
)
def test_malformed_answer_fails_whole_ingestion(payload):
    with pytest.raises(IngestionError):
        parse_ai_response(payload)


def test_build_extraction_prompt_mentions_text_and_fields():
    prompt = build_extraction_prompt("  Factura F-001 de Acme SL por 121 euros  ")
    assert "Factura F-001 de Acme SL por 121 euros" in prompt
    for name in AI_FIELDS:
        assert name in prompt


def test_extract_with_ai_calls_extractor_once():
    extractor = Mock(return_value=json.dumps(ANSWER))
    rows = extract_with_ai("Factura F-001 ...", extractor)
    assert len(rows) == 2
    extractor.assert_called_once()
    assert "Factura F-001 ..." in extractor.call_args[0][0]


def test_extract_with_ai_blank_text_skips_extractor():
    extractor = Mock()
    assert extract_with_ai("   ", extractor) == []
    extractor.assert_not_called()


def test_extract_with_ai_wraps_extractor_failure():
    extractor = Mock(side_effect=TimeoutError("quota exceeded"))
    with pytest.raises(IngestionError) as e:
        extract_with_ai("Factura", extractor)
    assert "quota exceeded" in str(e.value)
