r"""
Script principal de reindexado masivo Solr → MongoDB.

Arquitectura:
- solrmigra.py: Punto de entrada (selección de jobs, códigos de salida)
- migrators/orchestrator.py: Conexiones y ejecución secuencial fail-fast
- migrators/job.py: Framework de job (vaciar → paginar → transformar → upsert)
- migrators/<core>.py: transform(raw) específico de cada core
- config.py: Conexiones y tabla fija de jobs

Flujo de ejecución:
1. Resolver jobs a ejecutar (todos, o los indicados, en MIGRATION_ORDER)
2. Conectar a MongoDB y abrir sesión HTTP con Solr
3. Por cada job: vaciar colección, recorrer el core con cursorMark,
   transformar cada página y escribirla con upserts por _id
4. Cerrar conexiones SIEMPRE (también ante fallo o Ctrl+C)

Contrato de recuperación (si un job falla):
- Jobs anteriores: colecciones refrescadas por completo
- Job fallido: colección vacía o parcial → volver a ejecutarlo
- Jobs posteriores: no se ejecutan; sus colecciones quedan como estaban

Uso:
    python solrmigra.py                       # todos los jobs
    python solrmigra.py dirty_comments ftp_posts
    python solrmigra.py --list

Exit Codes:
    0: Éxito
    1: Fallo de un job o de conexión
    2: Job desconocido
    130: Interrumpido por el usuario
"""

import io
import sys

import config
from migrators.errors import MigrationError, TargetConnectionError
from migrators.job import JobSpec
from migrators.orchestrator import Orchestrator

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_job_specs(job_names=None):
    """
    Construye la lista ordenada de JobSpec.

    El orden es SIEMPRE el de config.MIGRATION_ORDER, aunque job_names
    venga en otro orden.

    Args:
        job_names: Nombres a ejecutar (None = todos)

    Returns:
        list: JobSpec en orden de ejecución

    Raises:
        KeyError: Si algún nombre no está configurado
    """
    if job_names:
        for name in job_names:
            config.get_job_config(name)
        selected = set(job_names)
        names = [name for name in config.MIGRATION_ORDER if name in selected]
    else:
        names = list(config.MIGRATION_ORDER)

    return [JobSpec.from_config(name, config.get_job_config(name)) for name in names]


def print_jobs():
    """Lista los jobs configurados en orden de ejecución."""
    print("\n" + "=" * 70)
    print("📚 JOBS CONFIGURADOS (orden de ejecución)")
    print("=" * 70)

    for i, name in enumerate(config.MIGRATION_ORDER, 1):
        cfg = config.get_job_config(name)
        print(f"\n{i}. {name}")
        print(f"   └─ {cfg.get('description', 'Sin descripción')}")
        print(
            f"   └─ Solr: {cfg['solr_core']} → Mongo: {cfg['mongo_collection']} "
            f"| Página: {cfg['page_size']}"
        )

    print("\n" + "=" * 70)


def print_recovery_contract(failed, results):
    """Explica en stderr en qué estado quedó MongoDB tras un fallo."""
    done = [r["job"] for r in results if r["state"] == "done"]

    print("\n⚠️  Estado de MongoDB tras el fallo:", file=sys.stderr)
    if done:
        print(f"   ✅ Refrescadas por completo: {', '.join(done)}", file=sys.stderr)
    if failed:
        print(
            f"   ❌ '{failed}': colección vacía o parcial → re-ejecutar "
            f"'python solrmigra.py {failed}'",
            file=sys.stderr,
        )
    print(
        "   ⏭️  Jobs posteriores no ejecutados: conservan los datos anteriores",
        file=sys.stderr,
    )


def main(argv=None, orchestrator_factory=Orchestrator):
    """
    Función principal que coordina el reindexado completo.

    Args:
        argv: Argumentos (sin el nombre del script); por defecto sys.argv[1:]
        orchestrator_factory: Constructor del Orchestrator (inyectable en tests)

    Returns:
        int: Código de salida
    """
    args = sys.argv[1:] if argv is None else list(argv)

    if "--list" in args:
        print_jobs()
        return EXIT_OK

    try:
        specs = build_job_specs(args)
    except KeyError as e:
        print(f"❌ {e.args[0]}", file=sys.stderr)
        return EXIT_USAGE

    print("=" * 70)
    print("🚀 REINDEXADO SOLR → MONGODB")
    print("=" * 70)
    print(f"📍 Solr: {config.get_solr_base_url()}")
    print(f"📍 MongoDB: {config.MONGO_DATABASE_NAME}")
    print(f"📦 Jobs: {', '.join(spec.name for spec in specs)}")

    orchestrator = orchestrator_factory(
        config.MONGO_URI,
        config.MONGO_DATABASE_NAME,
        config.get_solr_base_url(),
        solr_auth=config.get_solr_auth(),
        solr_timeout=config.SOLR_CONFIG["timeout"],
    )

    try:
        with orchestrator:
            summary = orchestrator.run(specs)

    except TargetConnectionError as e:
        print(f"\n❌ {e}", file=sys.stderr)
        return EXIT_FAILURE

    except MigrationError as e:
        print(f"\n❌ Migración fallida en job '{e.job}': {e}", file=sys.stderr)
        print_recovery_contract(e.job, orchestrator.results)
        return EXIT_FAILURE

    except KeyboardInterrupt:
        print("\n\n👋 Migración interrumpida por usuario", file=sys.stderr)
        print_recovery_contract(orchestrator.current_job, orchestrator.results)
        return EXIT_INTERRUPTED

    print("\n" + "=" * 70)
    print(
        f"🎉 PROCESO COMPLETADO: {summary['written']:,} documentos escritos, "
        f"{summary['rejected']:,} rechazados"
    )
    print("=" * 70)
    return EXIT_OK


def cli():
    """Entry point del comando `solrmigra` instalado con pip."""
    sys.exit(main())


if __name__ == "__main__":
    # Forzar UTF-8 en stdout/stderr para emojis en Windows
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8")

    cli()
