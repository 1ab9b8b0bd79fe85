"""
Transform del core ftp_links → colección ftp_comments.

Cada registro es un enlace geolocalizado extraído de un comentario.
La identidad es el comentario (CommentId), no el id interno de Solr.

Reglas:
- CommentId → _id; el id de Solr se descarta
- UserId, PostId, Rating, CreatedDate se descartan (viven en d3)
- IsExtracted → extracted
- Longitude, Latitude → longitude, latitude (dispersos: sin geocoding
  no hay claves de coordenadas)
"""

from .normalize import (
    drop_fields,
    move_field,
    set_primary_key,
    set_sparse_number,
    start_document,
)

DROPPED_FIELDS = ("id", "UserId", "PostId", "Rating", "CreatedDate")


def transform(raw: dict) -> dict:
    doc = start_document(raw)
    set_primary_key(doc, "CommentId", record=raw)
    drop_fields(doc, DROPPED_FIELDS)

    move_field(doc, "IsExtracted", "extracted")

    set_sparse_number(doc, "Longitude", "longitude")
    set_sparse_number(doc, "Latitude", "latitude")
    return doc
