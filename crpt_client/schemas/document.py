"""Pydantic schemas for the CRPT document creation request body."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
)


class Description(BaseModel):
    """Document description block."""

    model_config = _CAMEL_CONFIG

    participant_inn: str | None = Field(
        default=None,
        description="Taxpayer number of the participant submitting the document.",
    )


class Product(BaseModel):
    """A single product entry introduced into circulation."""

    model_config = _CAMEL_CONFIG

    certificate_document: str | None = None
    certificate_document_date: str | None = None
    certificate_document_number: str | None = None
    owner_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = Field(
        default=None, description="Production date as sent to the API (YYYY-MM-DD)."
    )
    tnved_code: str | None = Field(
        default=None, description="Commodity nomenclature (TN VED) code."
    )
    uit_code: str | None = Field(
        default=None, description="Unique identification code of the item."
    )
    uitu_code: str | None = Field(
        default=None, description="Unique identification code of the transport package."
    )


class Document(BaseModel):
    """Document introducing goods produced in the Russian Federation into circulation."""

    model_config = _CAMEL_CONFIG

    description: Description | None = None
    doc_id: str | None = None
    doc_status: str | None = None
    doc_type: str | None = Field(
        default=None, description="Document type, e.g. 'LP_INTRODUCE_GOODS'."
    )
    import_request: bool = False
    owner_inn: str | None = None
    participant_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = None
    production_type: str | None = None
    products: List[Product] | None = None
    reg_date: str | None = None
    reg_number: str | None = None

    def to_request_body(self) -> bytes:
        """Serialize to the JSON body expected by the API.

        Keys are camelCase and fields left as ``None`` are omitted.
        """

        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
