"""
export_sample.py - Exporta una muestra de un core de Solr ya transformada

Lee la primera página del core de un job, aplica su transform y guarda
ambos lados (crudo y normalizado) para revisar las reglas de mapeo sin
tocar MongoDB.

Uso:
    python export_sample.py <job_name> [limit]

Ejemplo:
    python export_sample.py ftp_posts 200
"""

import sys
from pathlib import Path

import requests
from bson.json_util import dumps

import config
from migrators.errors import MalformedRecord, MigrationError
from migrators.job import load_transform
from migrators.source import SolrClient


def build_sample(docs, transform):
    """
    Aplica transform a cada documento crudo.

    Returns:
        list: [{'raw': dict, 'normalized': dict|None, 'rejected': str|None}]
    """
    sample = []
    for raw in docs:
        try:
            sample.append({"raw": raw, "normalized": transform(raw), "rejected": None})
        except MalformedRecord as e:
            sample.append({"raw": raw, "normalized": None, "rejected": str(e)})
    return sample


def export_job_sample(job_name, limit=200, samples_dir="samples", session=None):
    """
    Exporta muestra de un job a JSON en formato Extended JSON.

    Args:
        job_name: Nombre del job en config.JOBS
        limit: Número de documentos a exportar
        samples_dir: Directorio de salida
        session: requests.Session (por defecto se crea una)

    Returns:
        Path|None: Archivo generado, o None si el core está vacío
    """
    cfg = config.get_job_config(job_name)
    transform = load_transform(cfg["transform"])

    own_session = session is None
    session = session or requests.Session()
    try:
        solr = SolrClient(
            config.get_solr_base_url(),
            session,
            auth=config.get_solr_auth(),
            timeout=config.SOLR_CONFIG["timeout"],
        )
        print(f"📥 Obteniendo {limit} documentos de '{cfg['solr_core']}'...")
        docs, _ = solr.open_cursor(cfg["solr_core"], limit).next_page()
    finally:
        if own_session:
            session.close()

    if not docs:
        print(f"⚠️  El core '{cfg['solr_core']}' está vacío o no existe")
        return None

    sample = build_sample(docs, transform)

    samples_path = Path(samples_dir)
    samples_path.mkdir(exist_ok=True)

    # bson.json_util mantiene visibles los datetime ya normalizados
    json_output = dumps(sample, indent=2, ensure_ascii=False)

    filename = samples_path / f"{job_name}_sample.json"
    with open(filename, "w", encoding="utf-8") as f:
        f.write(json_output)

    rejected = sum(1 for item in sample if item["rejected"])
    print(f"✅ Exportados {len(sample)} documentos ({rejected} rechazados)")
    print(f"📄 Archivo: {filename}")
    print(f"📊 Tamaño: {len(json_output) / 1024:.2f} KB")
    return filename


if __name__ == "__main__":
    # Argumentos por línea de comandos
    if len(sys.argv) < 2:
        print("Uso: python export_sample.py <job_name> [limit]")
        print("Ejemplo: python export_sample.py ftp_posts 200")
        sys.exit(1)

    job_name = sys.argv[1]
    limit = int(sys.argv[2]) if len(sys.argv) > 2 else 200

    try:
        export_job_sample(job_name, limit)
    except KeyError as e:
        print(f"❌ {e.args[0]}", file=sys.stderr)
        sys.exit(2)
    except MigrationError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
