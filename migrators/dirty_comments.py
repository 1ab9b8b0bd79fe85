"""
Transform del core d3_comments → colección dirty_comments.

Reglas:
- id → _id
- parent_id vacío o 0 se elimina (comentario raíz); si no, número
  (el valor original solo si no es numérico)
- body → text (se mueve, no se copia)
- post_id, user_id → número con fallback
- created → datetime UTC
"""

from .normalize import (
    coerce_number,
    is_blank,
    is_nan,
    move_field,
    normalize_dates,
    set_primary_key,
    start_document,
    to_number,
)

FOREIGN_KEYS = ("post_id", "user_id")
DATE_FIELDS = ("created",)


def transform(raw: dict) -> dict:
    doc = start_document(raw)
    set_primary_key(doc, "id", record=raw)

    # Hilos: sin padre = comentario de primer nivel, nunca parent_id null
    parent_id = doc.pop("parent_id", None)
    if not is_blank(parent_id):
        number = to_number(parent_id)
        doc["parent_id"] = parent_id if is_nan(number) else number

    move_field(doc, "body", "text")

    for field in FOREIGN_KEYS:
        if field in doc:
            doc[field] = coerce_number(doc[field])

    normalize_dates(doc, DATE_FIELDS)
    return doc
