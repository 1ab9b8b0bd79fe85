"""
Escritura idempotente por batches contra una colección de MongoDB.

Cada registro se escribe como ReplaceOne({_id}, doc, upsert=True): inserta
si no existe y reemplaza el documento COMPLETO si ya existe. Re-ejecutar
el mismo batch converge siempre al mismo estado (sin duplicados).
"""

from pymongo import ReplaceOne
from pymongo.errors import PyMongoError

from .errors import WriteError
from .normalize import PRIMARY_KEY


class BatchUpserter:
    """
    Upserts por batch sobre una colección destino.

    Attributes:
        collection: Colección de pymongo
        batches_written (int): Batches enviados con éxito
        records_written (int): Registros enviados con éxito
    """

    def __init__(self, collection):
        self.collection = collection
        self.batches_written = 0
        self.records_written = 0

    @property
    def name(self) -> str:
        return self.collection.name

    def clear(self) -> int:
        """
        Vacía la colección destino (full refresh).

        Returns:
            int: Documentos eliminados

        Raises:
            WriteError: Si MongoDB rechaza el borrado
        """
        try:
            result = self.collection.delete_many({})
        except PyMongoError as e:
            raise WriteError(
                f"No se pudo vaciar '{self.name}': {e}", collection=self.name
            ) from e
        return result.deleted_count

    def upsert(self, records, batch_index=None) -> int:
        """
        Escribe un batch completo en un solo round trip.

        Args:
            records: Lista de NormalizedRecord (todos con _id)
            batch_index: Índice del batch (para el error); por defecto el
                         número de batches ya escritos

        Returns:
            int: Registros escritos

        Raises:
            WriteError: Si el bulk write falla (el batch NO se reintenta)
        """
        if batch_index is None:
            batch_index = self.batches_written
        if not records:
            return 0

        ops = [
            ReplaceOne({PRIMARY_KEY: doc[PRIMARY_KEY]}, doc, upsert=True)
            for doc in records
        ]
        try:
            # Ordenado: con _id repetido en el batch gana el último registro
            self.collection.bulk_write(ops, ordered=True)
        except PyMongoError as e:
            raise WriteError(
                f"Batch {batch_index} rechazado por '{self.name}': {e}",
                collection=self.name,
                batch_index=batch_index,
            ) from e

        self.batches_written += 1
        self.records_written += len(ops)
        return len(ops)
