"""
Transform del core ftp_posts → colección ftp_posts.

Solo se conserva el estado de búsqueda del lugar; el contenido del post
ya está en dirty_posts.

Reglas:
- id → _id
- Title, Image, Rating, Tags, Content, CommentsCount, CreatedDate,
  ChangedDate, CreatedById se descartan
- IsFound → found
- Longitude, Latitude, FoundById → longitude, latitude, found_by_id
  (dispersos)
- FoundDate → found_date (disperso) y datetime UTC si es parseable
"""

from .normalize import (
    drop_fields,
    is_blank,
    move_field,
    normalize_dates,
    set_primary_key,
    set_sparse_number,
    start_document,
)

DROPPED_FIELDS = (
    "Title",
    "Image",
    "Rating",
    "Tags",
    "Content",
    "CommentsCount",
    "CreatedDate",
    "ChangedDate",
    "CreatedById",
)


def transform(raw: dict) -> dict:
    doc = start_document(raw)
    set_primary_key(doc, "id", record=raw)
    drop_fields(doc, DROPPED_FIELDS)

    move_field(doc, "IsFound", "found")

    set_sparse_number(doc, "Longitude", "longitude")
    set_sparse_number(doc, "Latitude", "latitude")
    set_sparse_number(doc, "FoundById", "found_by_id")

    found_date = doc.pop("FoundDate", None)
    if not is_blank(found_date):
        doc["found_date"] = found_date
        normalize_dates(doc, ("found_date",))
    return doc
