"""
Taxonomía de errores del pipeline de reindexado.

Política de propagación:
- MalformedRecord: se recupera localmente (el job lo omite y lo cuenta)
- SourceUnavailable, WriteError: fatales para el job y, por fail-fast,
  para toda la ejecución
- TargetConnectionError: MongoDB inaccesible al arrancar o cerrar

No hay reintentos automáticos en ninguna capa: la recuperación consiste
en volver a ejecutar el job (o el pipeline completo), lo cual es seguro
porque cada job vacía su colección y escribe con upserts por _id.
"""


class MigrationError(Exception):
    """
    Error base del pipeline.

    Attributes:
        job (str|None): Nombre del job en curso cuando ocurrió el error.
                        Lo completa MigrationJob al propagarlo.
    """

    def __init__(self, message, job=None):
        super().__init__(message)
        self.job = job


class SourceUnavailable(MigrationError):
    """Fallo de transporte o de consulta contra la API de búsqueda de Solr."""

    def __init__(self, message, core=None, cursor_mark=None, job=None):
        super().__init__(message, job=job)
        self.core = core
        self.cursor_mark = cursor_mark


class WriteError(MigrationError):
    """
    MongoDB rechazó una escritura.

    Attributes:
        collection (str): Colección destino
        batch_index (int|None): Índice (desde 0) del batch que falló.
                                None si falló el vaciado inicial.
    """

    def __init__(self, message, collection=None, batch_index=None, job=None):
        super().__init__(message, job=job)
        self.collection = collection
        self.batch_index = batch_index


class MalformedRecord(MigrationError):
    """Registro sin primary key: se rechaza, se cuenta y NO es fatal."""

    def __init__(self, message, record=None):
        super().__init__(message)
        self.record = record


class TargetConnectionError(MigrationError):
    """MongoDB inaccesible al abrir o cerrar la conexión."""
