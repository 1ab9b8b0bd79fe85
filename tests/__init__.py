"""
Suite de tests para el reindexado Solr → MongoDB.

Los tests NO se conectan a Solr ni a MongoDB reales, solo validan:
- Sintaxis de código Python
- Reglas de transformación de cada core
- Paginación con cursorMark, upserts idempotentes y política fail-fast
  (con dobles en memoria de tests/helpers.py)
"""
