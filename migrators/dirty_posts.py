"""
Transform del core d3_posts → colección dirty_posts.

Reglas:
- id → _id (número con fallback)
- user_id → número con fallback (solo si viene informado)
- created, changed → datetime UTC si son parseables
"""

from .normalize import coerce_number, normalize_dates, set_primary_key, start_document

DATE_FIELDS = ("created", "changed")


def transform(raw: dict) -> dict:
    doc = start_document(raw)
    set_primary_key(doc, "id", record=raw)

    if doc.get("user_id") is not None:
        doc["user_id"] = coerce_number(doc["user_id"])

    normalize_dates(doc, DATE_FIELDS)
    return doc
