"""
Paginación profunda contra Solr usando cursorMark.

Un SolrCursor produce una secuencia finita y NO reiniciable de páginas de
registros crudos, ordenadas por id ascendente. Solo se mantiene en memoria
la página actual: el consumo de memoria es O(page_size) sin importar el
tamaño del core.

Terminación:
- Página vacía
- Solr devuelve el mismo cursorMark que se le envió (detección de bucle)
- Solr no devuelve nextCursorMark

Uso:
    client = SolrClient('http://solr:8983/solr', session=requests.Session())
    cursor = client.open_cursor('d3_posts', page_size=1000)

    for docs in cursor:
        ...
"""

import requests

from .errors import SourceUnavailable

START_CURSOR = "*"
SORT_FIELD = "id"


class SolrClient:
    """
    Acceso de solo lectura a los cores de Solr.

    La sesión HTTP la crea y la cierra el Orchestrator; aquí solo se usa.

    Attributes:
        base_url (str): URL base, ej: 'http://localhost:8983/solr'
        session: requests.Session compartida
        timeout (float): Timeout por request en segundos
    """

    def __init__(self, base_url: str, session, auth=None, timeout: float = 60):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.auth = auth
        self.timeout = timeout

    def open_cursor(self, core: str, page_size: int):
        """Abre un cursor nuevo al inicio del core (cursorMark='*')."""
        return SolrCursor(self, core, page_size)

    def select(self, core: str, params: dict) -> dict:
        """
        Ejecuta una consulta /select y retorna el JSON de respuesta.

        Raises:
            SourceUnavailable: Error de transporte, HTTP o respuesta inválida
        """
        url = f"{self.base_url}/{core}/select"
        try:
            resp = self.session.get(
                url, params=params, auth=self.auth, timeout=self.timeout
            )
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            raise SourceUnavailable(
                f"Solr no disponible para core '{core}': {e}",
                core=core,
                cursor_mark=params.get("cursorMark"),
            ) from e
        except ValueError as e:
            raise SourceUnavailable(
                f"Respuesta no JSON de Solr para core '{core}': {e}",
                core=core,
                cursor_mark=params.get("cursorMark"),
            ) from e

        if not isinstance(payload, dict) or "response" not in payload:
            error = payload.get("error") if isinstance(payload, dict) else None
            raise SourceUnavailable(
                f"Respuesta inesperada de Solr para core '{core}': {error or payload!r}",
                core=core,
                cursor_mark=params.get("cursorMark"),
            )
        return payload


class SolrCursor:
    """
    Cursor sobre un core completo.

    Attributes:
        core (str): Nombre del core
        page_size (int): Registros por página
        cursor_mark (str): Token actual ('*' al inicio)
        num_found (int|None): Total informado por Solr (tras la 1a página)
        pages_fetched (int): Requests realizados
        done (bool): True cuando la secuencia terminó
    """

    def __init__(self, client: SolrClient, core: str, page_size: int):
        if page_size <= 0:
            raise ValueError(f"page_size debe ser positivo (recibido {page_size})")

        self.client = client
        self.core = core
        self.page_size = page_size
        self.cursor_mark = START_CURSOR
        self.num_found = None
        self.pages_fetched = 0
        self.done = False

    def next_page(self):
        """
        Pide la siguiente página a Solr (exactamente un request).

        Returns:
            tuple: (docs: list[dict], done: bool)

        Raises:
            SourceUnavailable: Si Solr falla o si el cursor ya terminó
        """
        if self.done:
            raise SourceUnavailable(
                f"Cursor de '{self.core}' agotado: abrir uno nuevo para releer",
                core=self.core,
                cursor_mark=self.cursor_mark,
            )

        params = {
            "q": "*:*",
            "rows": self.page_size,
            "sort": f"{SORT_FIELD} asc",
            "cursorMark": self.cursor_mark,
            "wt": "json",
        }
        payload = self.client.select(self.core, params)
        self.pages_fetched += 1

        response = payload["response"]
        docs = response.get("docs") or []
        if self.num_found is None:
            self.num_found = response.get("numFound")

        next_mark = payload.get("nextCursorMark")
        if not docs or not next_mark or next_mark == self.cursor_mark:
            self.done = True
        if next_mark:
            self.cursor_mark = next_mark

        return docs, self.done

    def __iter__(self):
        """Itera páginas no vacías hasta agotar el cursor."""
        while not self.done:
            docs, _ = self.next_page()
            if docs:
                yield docs
