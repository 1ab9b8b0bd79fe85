"""
Framework de jobs de migración: un core de Solr → una colección de MongoDB.

Un MigrationJob une:
- SolrCursor (produce páginas de registros crudos)
- transform(raw) del módulo del core (registro crudo → normalizado)
- BatchUpserter (escribe cada página como un batch idempotente)
- Política "vaciar destino primero" (full refresh, no sync incremental)

Máquina de estados:
    init → clearing → paging → draining → done
    clearing | paging | draining → failed

Los transforms se resuelven por nombre al construir el job
(migrators.<nombre>.transform), igual que el resto de la configuración:
son funciones puras independientes, no subclases de una base común.
"""

import importlib
from collections import namedtuple

from .errors import MalformedRecord, MigrationError
from .upserter import BatchUpserter


class JobState:
    INIT = "init"
    CLEARING = "clearing"
    PAGING = "paging"
    DRAINING = "draining"
    DONE = "done"
    FAILED = "failed"


class JobSpec(
    namedtuple("JobSpec", ["name", "solr_core", "mongo_collection", "transform", "page_size"])
):
    """
    Descriptor inmutable de un job.

    Attributes:
        name (str): Nombre del job (clave en config.JOBS)
        solr_core (str): Core origen
        mongo_collection (str): Colección destino
        transform (str): Módulo de migrators/ con la función transform
        page_size (int): Registros por página y por batch
    """

    __slots__ = ()

    @classmethod
    def from_config(cls, job_name: str, cfg: dict):
        """Construye el descriptor desde una entrada de config.JOBS."""
        return cls(
            name=job_name,
            solr_core=cfg["solr_core"],
            mongo_collection=cfg["mongo_collection"],
            transform=cfg["transform"],
            page_size=int(cfg["page_size"]),
        )


def load_transform(module_name: str):
    """
    Carga dinámicamente la función transform de un core.

    Convención:
        'ftp_posts' → migrators.ftp_posts.transform

    Raises:
        ImportError: Si no existe el módulo
        AttributeError: Si el módulo no expone una función transform
    """
    module = importlib.import_module(f"{__package__}.{module_name}")
    transform = getattr(module, "transform")
    if not callable(transform):
        raise AttributeError(f"migrators.{module_name}.transform no es callable")
    return transform


class MigrationJob:
    """
    Migración completa de un core.

    Attributes:
        spec (JobSpec): Descriptor del job
        transform: Función raw → NormalizedRecord
        state (str): Estado actual (ver JobState)
        pages (int): Páginas no vacías procesadas
        written (int): Registros escritos en MongoDB
        rejected (int): Registros sin primary key omitidos
        num_found (int|None): Total informado por Solr
    """

    def __init__(self, spec: JobSpec, transform=None, out=print):
        self.spec = spec
        self.transform = transform or load_transform(spec.transform)
        self.out = out
        self.state = JobState.INIT
        self.pages = 0
        self.written = 0
        self.rejected = 0
        self.num_found = None
        self.cursor_mark = None

    @property
    def name(self) -> str:
        return self.spec.name

    def transform_page(self, docs):
        """
        Aplica el transform a una página.

        Returns:
            list: Registros normalizados (los rechazados se cuentan en
                  self.rejected y no se incluyen)
        """
        records = []
        for raw in docs:
            try:
                records.append(self.transform(raw))
            except MalformedRecord:
                self.rejected += 1
        return records

    def run(self, solr_client, mongo_db) -> dict:
        """
        Ejecuta el job de principio a fin.

        Args:
            solr_client: SolrClient compartido
            mongo_db: Database de pymongo (conexión del Orchestrator)

        Returns:
            dict: Resultado (ver result())

        Raises:
            MigrationError: SourceUnavailable o WriteError, con .job asignado.
                            La colección destino queda vacía o parcial.
        """
        spec = self.spec
        upserter = BatchUpserter(mongo_db[spec.mongo_collection])

        try:
            self.state = JobState.CLEARING
            deleted = upserter.clear()
            self.out(f"   🗑️  '{spec.mongo_collection}' vaciada ({deleted:,} documentos)")

            cursor = solr_client.open_cursor(spec.solr_core, spec.page_size)
            self.state = JobState.PAGING

            done = False
            while not done:
                docs, done = cursor.next_page()
                self.cursor_mark = cursor.cursor_mark
                if self.num_found is None and cursor.num_found is not None:
                    self.num_found = cursor.num_found
                    self.out(f"   📊 Total en Solr: {self.num_found:,}")
                if not docs:
                    break

                records = self.transform_page(docs)
                self.written += upserter.upsert(records, batch_index=self.pages)
                self.pages += 1
                self.out(
                    f"   ⏳ Migrados {len(records)} docs, nextCursor={cursor.cursor_mark}"
                )

            # Cada página ya se escribió: no hay buffer pendiente
            self.state = JobState.DRAINING
            self.check_completeness()
            self.state = JobState.DONE
        except MigrationError as e:
            self.state = JobState.FAILED
            e.job = spec.name
            raise
        except BaseException:
            # Interrupción (Ctrl+C) o error inesperado: mismo efecto que un fallo
            self.state = JobState.FAILED
            raise

        return self.result()

    def check_completeness(self):
        """Avisa (sin fallar) si escritos + rechazados != numFound de Solr."""
        if self.num_found is None:
            return True
        processed = self.written + self.rejected
        if processed != self.num_found:
            self.out(
                f"   ⚠️  Procesados {processed:,} de {self.num_found:,} "
                f"(¿el core cambió durante la migración?)"
            )
            return False
        return True

    def result(self) -> dict:
        return {
            "job": self.spec.name,
            "solr_core": self.spec.solr_core,
            "mongo_collection": self.spec.mongo_collection,
            "state": self.state,
            "pages": self.pages,
            "written": self.written,
            "rejected": self.rejected,
            "num_found": self.num_found,
        }
