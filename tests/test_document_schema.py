"""Tests for document serialization."""

import json

from crpt_client.schemas.document import Document


def test_request_body_uses_camel_case_keys(sample_document: Document) -> None:
    payload = json.loads(sample_document.to_request_body())

    assert payload["docId"] == "doc-1"
    assert payload["docType"] == "LP_INTRODUCE_GOODS"
    assert payload["description"] == {"participantInn": "7701234567"}
    assert payload["products"][0]["tnvedCode"] == "6401100000"
    assert payload["products"][0]["uitCode"] == "010460043993125621JgXJ5.T"
    assert "doc_id" not in payload


def test_request_body_omits_unset_fields(sample_document: Document) -> None:
    payload = json.loads(sample_document.to_request_body())

    assert "docStatus" not in payload
    assert "regNumber" not in payload
    assert "uituCode" not in payload["products"][0]
    # Booleans are always sent.
    assert payload["importRequest"] is False


def test_accepts_field_names_and_aliases() -> None:
    by_alias = Document.model_validate({"docId": "a", "importRequest": True})
    by_name = Document.model_validate({"doc_id": "a", "import_request": True})

    assert by_alias == by_name
    assert by_alias.import_request is True
