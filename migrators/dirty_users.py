"""Transform del core d3_users → colección dirty_users (solo primary key)."""

from .normalize import set_primary_key, start_document


def transform(raw: dict) -> dict:
    doc = start_document(raw)
    set_primary_key(doc, "id", record=raw)
    return doc
