"""
Configuración centralizada para el pipeline de reindexado Solr → MongoDB.

ARQUITECTURA:
Cada core de Solr se migra con un job independiente que reemplaza por
completo su colección destino en MongoDB:
- dirty_*: posts, usuarios y comentarios del sitio d3
- ftp_*: posts geolocalizados y enlaces (comentarios) de findthisplace

FLUJO DE MIGRACIÓN:
1. Ejecutar jobs en orden de MIGRATION_ORDER (secuencial, fail-fast)
2. Cada job vacía su colección destino y la recarga desde Solr
3. Si un job falla, los posteriores NO se ejecutan

USO DE LAS FUNCIONES HELPER:
    cfg = get_job_config('dirty_comments')
    cfg['solr_core']        # 'd3_comments'
    get_page_size('dirty_comments')  # 3000
"""

import os
from dotenv import load_dotenv

# Carga las variables del archivo .env en las variables de entorno del sistema
load_dotenv(override=True)

# --- Configuración de Solr (Origen) ---
SOLR_CONFIG = {
    "host": os.getenv("SOLR_HOST") or "localhost",
    "port": os.getenv("SOLR_PORT") or "8983",
    "protocol": os.getenv("SOLR_PROTOCOL") or "http",
    "username": os.getenv("SOLR_USERNAME") or "",
    "password": os.getenv("SOLR_PASSWORD") or "",
    "timeout": float(os.getenv("SOLR_TIMEOUT") or 60),
}

# --- Configuración de MongoDB (Destino) ---
MONGO_URI = (
    f"mongodb://{os.getenv('MONGO_USERNAME')}:{os.getenv('MONGO_PASSWORD')}"
    f"@{os.getenv('MONGO_HOST')}"
)
MONGO_DATABASE_NAME = os.getenv("MONGO_DB") or "findthisplace"

# --- Configuración de Jobs ---
# Cada job define:
# - solr_core: Core de Solr que se lee completo (cursorMark, id asc)
# - mongo_collection: Colección destino (se vacía antes de recargar)
# - transform: Módulo en migrators/ que expone transform(raw)
# - page_size: Registros por página de Solr = tamaño de batch de escritura
# - description: Descripción de negocio

JOBS = {
    "dirty_posts": {
        "solr_core": "d3_posts",
        "mongo_collection": "dirty_posts",
        "transform": "dirty_posts",
        "page_size": 1000,
        "description": "Posts de d3 con autor y fechas de creación/cambio",
    },
    "dirty_users": {
        "solr_core": "d3_users",
        "mongo_collection": "dirty_users",
        "transform": "dirty_users",
        "page_size": 1000,
        "description": "Usuarios de d3",
    },
    "dirty_comments": {
        "solr_core": "d3_comments",
        "mongo_collection": "dirty_comments",
        "transform": "dirty_comments",
        "page_size": 3000,  # Core de alto volumen
        "description": "Comentarios de d3 (hilos vía parent_id)",
    },
    "ftp_comments": {
        "solr_core": "ftp_links",
        "mongo_collection": "ftp_comments",
        "transform": "ftp_comments",
        "page_size": 3000,  # Core de alto volumen
        "description": "Enlaces geolocalizados extraídos de comentarios",
    },
    "ftp_posts": {
        "solr_core": "ftp_posts",
        "mongo_collection": "ftp_posts",
        "transform": "ftp_posts",
        "page_size": 1000,
        "description": "Posts de findthisplace con estado de hallazgo y coordenadas",
    },
}

# --- Orden de Migración ---
# Orden fijo de ejecución. No hay dependencias entre colecciones,
# pero el orden se respeta siempre (también al re-ejecutar).
MIGRATION_ORDER = [
    "dirty_posts",
    "dirty_users",
    "dirty_comments",
    "ftp_comments",
    "ftp_posts",
]


# --- Funciones Helper ---


def get_job_config(job_name: str) -> dict:
    """
    Obtiene la configuración de un job por nombre.

    Args:
        job_name: Nombre del job (ej: 'dirty_posts')

    Returns:
        dict: Configuración con keys solr_core, mongo_collection,
              transform, page_size y description

    Raises:
        KeyError: Si el job no está configurado

    Ejemplo:
        >>> get_job_config('ftp_comments')['solr_core']
        'ftp_links'
    """
    if job_name not in JOBS:
        available = ", ".join(JOBS.keys())
        raise KeyError(
            f"Job '{job_name}' no está configurado.\n"
            f"Jobs disponibles: {available}"
        )
    return JOBS[job_name]


def get_page_size(job_name: str) -> int:
    """Tamaño de página (y de batch) fijo para un job."""
    return get_job_config(job_name)["page_size"]


def get_solr_base_url() -> str:
    """
    Construye la URL base de Solr a partir de SOLR_CONFIG.

    Ejemplo:
        >>> get_solr_base_url()
        'http://localhost:8983/solr'
    """
    return (
        f"{SOLR_CONFIG['protocol']}://{SOLR_CONFIG['host']}:"
        f"{SOLR_CONFIG['port']}/solr"
    )


def get_solr_auth():
    """Tupla (usuario, password) para basic auth, o None si no hay credenciales."""
    if SOLR_CONFIG["username"]:
        return (SOLR_CONFIG["username"], SOLR_CONFIG["password"])
    return None
