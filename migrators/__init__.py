"""
Jobs de reindexado para copiar cores de Solr a colecciones de MongoDB.

Cada core tiene un módulo con una función pura transform(raw) que se carga
dinámicamente por nombre (config.JOBS[...]['transform']) en job.py.

Estructura:
    errors.py: Taxonomía de errores (SourceUnavailable, WriteError, ...)
    normalize.py: Reglas compartidas (coerción numérica, fechas, renames)
    source.py: SolrClient / SolrCursor (paginación con cursorMark)
    upserter.py: BatchUpserter (ReplaceOne con upsert por _id)
    job.py: JobSpec, MigrationJob y carga de transforms
    orchestrator.py: Orchestrator (conexiones, orden, fail-fast)
    dirty_posts.py: d3_posts → dirty_posts
    dirty_users.py: d3_users → dirty_users
    dirty_comments.py: d3_comments → dirty_comments
    ftp_comments.py: ftp_links → ftp_comments
    ftp_posts.py: ftp_posts → ftp_posts

Interfaz requerida de cada módulo de core:
    - transform(raw) -> dict con '_id' y sin campos de control de Solr
    - lanza MalformedRecord solo si el registro no tiene primary key
"""
