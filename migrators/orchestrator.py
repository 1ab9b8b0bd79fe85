"""
Orquestador del pipeline: ejecuta la lista fija de jobs en orden.

Garantías:
- Una sola conexión a MongoDB y una sola sesión HTTP para Solr por
  ejecución, creadas al entrar y cerradas SIEMPRE al salir (éxito, fallo
  de un job o Ctrl+C)
- Jobs estrictamente secuenciales: un único job "en vuelo"
- Fail-fast: el primer job fallido aborta la ejecución; los siguientes
  no se inician y los anteriores conservan lo que ya escribieron

Contrato de recuperación tras un fallo:
- Colecciones de jobs anteriores: refrescadas por completo
- Colección del job fallido: vacía o parcial (re-ejecutar el job)
- Colecciones de jobs posteriores: intactas desde la ejecución previa

Uso:
    with Orchestrator(mongo_uri, 'findthisplace', solr_base_url) as orch:
        summary = orch.run(specs)
"""

import requests
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .errors import MigrationError, TargetConnectionError
from .job import MigrationJob
from .source import SolrClient


class Orchestrator:
    """
    Dueño exclusivo de las conexiones durante la ejecución.

    Attributes:
        mongo_client: MongoClient abierto (None fuera del context manager)
        mongo_db: Database destino
        solr: SolrClient sobre la sesión HTTP compartida
        results (list): Resultado de cada job ejecutado, en orden
    """

    def __init__(
        self,
        mongo_uri: str,
        database_name: str,
        solr_base_url: str,
        solr_auth=None,
        solr_timeout: float = 60,
        mongo_client_factory=MongoClient,
        session_factory=requests.Session,
        out=print,
    ):
        self.mongo_uri = mongo_uri
        self.database_name = database_name
        self.solr_base_url = solr_base_url
        self.solr_auth = solr_auth
        self.solr_timeout = solr_timeout
        self.mongo_client_factory = mongo_client_factory
        self.session_factory = session_factory
        self.out = out

        self.mongo_client = None
        self.mongo_db = None
        self.session = None
        self.solr = None
        self.results = []
        self.current_job = None

    # =========================================================================
    # CONEXIONES (adquisición con alcance)
    # =========================================================================

    def connect(self):
        """
        Abre MongoDB (verificado con ping) y la sesión HTTP de Solr.

        Raises:
            TargetConnectionError: Si MongoDB no responde
        """
        self.out("🔌 Conectando a MongoDB...")
        try:
            self.mongo_client = self.mongo_client_factory(
                self.mongo_uri, serverSelectionTimeoutMS=5000
            )
            self.mongo_client.admin.command("ping")
        except PyMongoError as e:
            self.close()
            raise TargetConnectionError(f"Error de conexión a MongoDB: {e}") from e

        self.mongo_db = self.mongo_client[self.database_name]
        self.out(f"✅ Conexión a MongoDB exitosa (base '{self.database_name}')")

        self.session = self.session_factory()
        self.solr = SolrClient(
            self.solr_base_url,
            self.session,
            auth=self.solr_auth,
            timeout=self.solr_timeout,
        )
        self.out(f"🔗 Solr: {self.solr_base_url}")

    def close(self):
        """
        Cierra sesión HTTP y conexión a MongoDB (idempotente).

        Raises:
            TargetConnectionError: Si el cierre de MongoDB falla
        """
        if self.session is not None:
            self.session.close()
            self.session = None
            self.solr = None

        if self.mongo_client is not None:
            client = self.mongo_client
            self.mongo_client = None
            self.mongo_db = None
            try:
                client.close()
            except PyMongoError as e:
                raise TargetConnectionError(
                    f"Error cerrando conexión a MongoDB: {e}"
                ) from e

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.out("🔒 Cerrando conexiones...")
        try:
            self.close()
        except TargetConnectionError:
            # Un error de cierre no debe ocultar el error original del run
            if exc_type is None:
                raise
        return False

    # =========================================================================
    # EJECUCIÓN
    # =========================================================================

    def run(self, specs, transforms=None) -> dict:
        """
        Ejecuta los jobs en el orden recibido (fail-fast).

        Args:
            specs: Lista ordenada de JobSpec
            transforms: Dict opcional nombre_job → transform (por defecto
                        se carga migrators.<spec.transform>.transform)

        Returns:
            dict: Resumen con keys 'jobs' (lista de resultados) y totales
                  'written', 'rejected'

        Raises:
            MigrationError: Del primer job fallido (con .job asignado)
        """
        if self.mongo_db is None:
            raise TargetConnectionError("Orchestrator.run() requiere conexión abierta")

        transforms = transforms or {}
        self.results = []

        # Resolver todos los transforms ANTES de vaciar ninguna colección
        jobs = [
            MigrationJob(spec, transform=transforms.get(spec.name), out=self.out)
            for spec in specs
        ]

        for position, job in enumerate(jobs, 1):
            spec = job.spec
            self.current_job = spec.name
            self.out("\n" + "=" * 70)
            self.out(
                f"🚚 [{position}/{len(jobs)}] {spec.name}: "
                f"{spec.solr_core} → {spec.mongo_collection} "
                f"(página {spec.page_size})"
            )
            self.out("=" * 70)

            try:
                job.run(self.solr, self.mongo_db)
            except MigrationError as e:
                self.results.append(job.result())
                self.out(f"❌ Job '{spec.name}' falló: {e}")
                raise

            self.current_job = None
            self.results.append(job.result())
            self.out(
                f"✅ {spec.name}: {job.written:,} escritos, "
                f"{job.rejected:,} rechazados, {job.pages:,} páginas"
            )

        return self.summary()

    def summary(self) -> dict:
        return {
            "jobs": list(self.results),
            "written": sum(r["written"] for r in self.results),
            "rejected": sum(r["rejected"] for r in self.results),
        }
