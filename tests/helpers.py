"""
Funciones helper y dobles en memoria compartidos por todos los tests.

Los tests NO se conectan a Solr ni a MongoDB reales:
- FakeSolrSession: imita GET /solr/<core>/select con cursorMark
- FakeMongoClient / FakeDatabase / FakeCollection: imitan delete_many y
  bulk_write(ReplaceOne) de pymongo sobre dicts en memoria
"""

import copy
import os
import sys

import requests
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

# Agregar directorio raíz al path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import config
from migrators.job import JobSpec

SOLR_URL = "http://solr.test:8983/solr"


# =============================================================================
# SOLR
# =============================================================================


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


def _sort_key(doc):
    value = doc.get("id")
    try:
        return (0, int(value))
    except (TypeError, ValueError):
        return (1, str(value))


class FakeSolrSession:
    """
    Sesión HTTP que sirve cores en memoria ordenados por id ascendente.

    Attributes:
        cores (dict): core → lista de documentos crudos
        calls (list): (core, params) de cada request
        fail_on_call (int|None): Nº de request (desde 1) que lanza ConnectionError
        stall_core (str|None): Core que devuelve siempre el mismo cursorMark
        closed (bool): True tras close()
    """

    def __init__(self, cores=None, fail_on_call=None, stall_core=None):
        self.cores = {
            name: sorted(docs, key=_sort_key) for name, docs in (cores or {}).items()
        }
        self.calls = []
        self.fail_on_call = fail_on_call
        self.stall_core = stall_core
        self.closed = False
        self._marks = {}

    def get(self, url, params=None, auth=None, timeout=None):
        params = dict(params or {})
        core = url.rstrip("/").split("/")[-2]
        self.calls.append((core, params))

        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise requests.ConnectionError("Connection refused")
        if core not in self.cores:
            return FakeResponse({"error": {"msg": f"Core {core} not found"}}, 404)

        docs = self.cores[core]
        mark = params.get("cursorMark", "*")
        start = 0 if mark == "*" else self._marks[(core, mark)]
        rows = int(params.get("rows", 10))
        page = docs[start:start + rows]

        if self.stall_core == core:
            next_mark = mark
        elif page:
            next_mark = f"AoE{core}-{start + len(page)}"
            self._marks[(core, next_mark)] = start + len(page)
        else:
            next_mark = mark

        return FakeResponse(
            {
                "responseHeader": {"status": 0},
                "response": {
                    "numFound": len(docs),
                    "start": 0,
                    "docs": copy.deepcopy(page),
                },
                "nextCursorMark": next_mark,
            }
        )

    def close(self):
        self.closed = True


# =============================================================================
# MONGODB
# =============================================================================


class DeleteResult:
    def __init__(self, deleted_count):
        self.deleted_count = deleted_count


class FakeCollection:
    """
    Colección en memoria: docs indexados por _id.

    Attributes:
        fail_on_batch (int|None): Nº de bulk_write (desde 0) que falla
        fail_on_delete (bool): delete_many lanza OperationFailure
        bulk_calls (int): bulk_write recibidos
        ordered_calls (list): Valor de ordered en cada bulk_write
    """

    def __init__(self, name):
        self.name = name
        self.docs = {}
        self.fail_on_batch = None
        self.fail_on_delete = False
        self.bulk_calls = 0
        self.ordered_calls = []

    def delete_many(self, filter):
        if self.fail_on_delete:
            raise OperationFailure("not authorized to delete")
        count = len(self.docs)
        self.docs.clear()
        return DeleteResult(count)

    def bulk_write(self, ops, ordered=True):
        call = self.bulk_calls
        self.bulk_calls += 1
        self.ordered_calls.append(ordered)
        if self.fail_on_batch is not None and call == self.fail_on_batch:
            raise OperationFailure("bulk write rejected")

        for op in ops:
            _id = op._filter["_id"]
            if _id in self.docs or op._upsert:
                self.docs[_id] = copy.deepcopy(op._doc)

    def snapshot(self):
        """Contenido ordenado por _id (comparable entre ejecuciones)."""
        return [self.docs[key] for key in sorted(self.docs, key=str)]


class FakeDatabase:
    def __init__(self, name):
        self.name = name
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]


class FakeAdmin:
    def __init__(self, client):
        self.client = client

    def command(self, name):
        if self.client.unreachable:
            raise ServerSelectionTimeoutError("mongo.test:27017: timed out")
        return {"ok": 1.0}


class FakeMongoClient:
    def __init__(self, unreachable=False):
        self.unreachable = unreachable
        self.databases = {}
        self.admin = FakeAdmin(self)
        self.closed = False
        self.uri = None

    def __getitem__(self, name):
        if name not in self.databases:
            self.databases[name] = FakeDatabase(name)
        return self.databases[name]

    def close(self):
        self.closed = True


def client_factory(client):
    """Factory compatible con MongoClient(uri, **kwargs) que devuelve client."""

    def factory(uri, **kwargs):
        client.uri = uri
        return client

    return factory


# =============================================================================
# DATOS
# =============================================================================


def make_docs(count, start=1, **extra):
    """Documentos crudos estilo Solr con id string y campo version."""
    return [
        dict({"id": str(i), "version": "1", "_version_": 170000 + i}, **extra)
        for i in range(start, start + count)
    ]


def make_spec(name="dirty_users", page_size=None, **overrides):
    """JobSpec desde config, con page_size opcionalmente reducido para tests."""
    cfg = dict(config.get_job_config(name), **overrides)
    if page_size is not None:
        cfg["page_size"] = page_size
    return JobSpec.from_config(name, cfg)


def silent(*args, **kwargs):
    """Reemplazo de print para jobs/orchestrator en tests."""
    return None


# =============================================================================
# EJECUCIÓN SIN PYTEST
# =============================================================================


def run_suite(title, tests):
    """
    Ejecuta una lista de funciones test_* e imprime el resultado.

    Returns:
        bool: True si todos los tests pasaron
    """
    print("=" * 70)
    print(f"🧪 {title}")
    print("=" * 70)

    failed = 0

    for test_func in tests:
        try:
            test_func()
        except AssertionError as e:
            print(f"\n❌ FALLO: {test_func.__name__}")
            print(f"   {e}")
            failed += 1
        except Exception as e:
            print(f"\n❌ ERROR: {test_func.__name__}")
            print(f"   {type(e).__name__}: {e}")
            failed += 1

    print("\n" + "=" * 70)
    if failed == 0:
        print("✅ TODOS LOS TESTS PASARON")
    else:
        print(f"❌ {failed} TEST(S) FALLARON")
    print("=" * 70)
    return failed == 0
