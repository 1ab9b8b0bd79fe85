"""
Reglas de normalización compartidas por los transforms de cada core.

Todas las funciones son puras: no hacen I/O y no mutan sus argumentos
salvo las que reciben explícitamente el dict de trabajo (move_field,
drop_fields, set_sparse_number), que operan sobre la COPIA que cada
transform crea del registro de Solr.

REGLAS:
- to_number(): interpreta un valor como número con la semántica de
  Number() de JavaScript; NaN si no es posible
- coerce_number(): número si es "verdadero", si no el valor ORIGINAL
  (fallback ante datos sucios, incluido el caso 0 o NaN)
- set_sparse_number(): igual, pero el campo desaparece si queda vacío
- parse_date(): ISO-8601 → datetime UTC, o el string original
"""

import math
import re
from datetime import datetime, timezone

from .errors import MalformedRecord

PRIMARY_KEY = "_id"

# Campos internos de Solr que nunca llegan a MongoDB
BOOKKEEPING_FIELDS = ("version", "_version_")

_DECIMAL_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
_HEX_RE = re.compile(r"0[xX][0-9a-fA-F]+")

# Enteros exactos representables como double
_MAX_SAFE_INT = 2 ** 53

# %z acepta 'Z', '+03:00' y '+0300'
_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
)


def to_number(value):
    """
    Interpreta value como número.

    Reproduce Number() de JavaScript para los tipos que devuelve Solr:
    - None, '' y strings en blanco → 0
    - bool → 0 / 1
    - int / float → sin cambios (float integral → int)
    - string con literal decimal o hexadecimal → número
    - cualquier otra cosa → NaN

    Returns:
        int|float: Valor numérico (float('nan') si no es interpretable)
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return _collapse(value)
    if not isinstance(value, str):
        return math.nan

    text = value.strip()
    if not text:
        return 0
    if _HEX_RE.fullmatch(text):
        return int(text, 16)
    if _DECIMAL_RE.fullmatch(text):
        if text.lstrip("+-").isdigit():
            return int(text)
        return _collapse(float(text))
    if text.lstrip("+-") == "Infinity":
        return float(text)
    return math.nan


def _collapse(number):
    """Float integral (y seguro) → int, para que MongoDB lo guarde entero."""
    if math.isfinite(number) and number.is_integer() and abs(number) < _MAX_SAFE_INT:
        return int(number)
    return number


def is_nan(value) -> bool:
    return isinstance(value, float) and math.isnan(value)


def is_blank(value) -> bool:
    """True para None, '', 0, NaN y False (los valores "falsy" de JavaScript)."""
    return not value or is_nan(value)


def coerce_number(value):
    """
    Convierte a número con fallback al valor original.

    Si la conversión da 0 o NaN, se conserva el valor tal cual venía de
    Solr ('0', 'abc', '', None...). El campo nunca se descarta aquí.

    Ejemplo:
        >>> coerce_number('42')
        42
        >>> coerce_number('abc')
        'abc'
        >>> coerce_number('0')
        '0'
    """
    number = to_number(value)
    if is_blank(number):
        return value
    return number


def move_field(doc: dict, source: str, target: str):
    """
    Renombra source → target (mover, no copiar).

    Si source no existe no se crea target.
    """
    if source in doc:
        doc[target] = doc.pop(source)


def drop_fields(doc: dict, fields):
    for field in fields:
        doc.pop(field, None)


def set_sparse_number(doc: dict, source: str, target: str):
    """
    Mueve source → target coercionando a número; campo disperso.

    El campo destino se elimina por completo cuando el valor no aporta
    información: ausente, None, '', 0 (también '0'), NaN. Un string no
    numérico y no vacío se conserva sin cambios (fallback).
    """
    raw = doc.pop(source, None)
    doc.pop(target, None)

    if is_blank(raw) or to_number(raw) == 0:
        return

    doc[target] = coerce_number(raw)


def set_primary_key(doc: dict, source: str, record=None):
    """
    Extrae la primary key de source y la guarda en PRIMARY_KEY.

    Raises:
        MalformedRecord: Si el registro no tiene primary key utilizable
    """
    value = doc.pop(source, None)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MalformedRecord(
            f"Registro sin primary key '{source}'",
            record=record if record is not None else doc,
        )
    doc[PRIMARY_KEY] = coerce_number(value)


def parse_date(value):
    """
    Parsea un string ISO-8601 a datetime con zona UTC.

    Formatos soportados:
    - '2021-05-01T00:00:00Z' / '2021-05-01T00:00:00.123Z'
    - '2021-05-01T03:00:00+03:00'
    - '2021-05-01' (se asume medianoche UTC)

    Solr recorta los ceros finales de la fracción ('.5Z', '.12Z'): %f
    acepta de 1 a 6 dígitos.

    Returns:
        datetime|None: Timestamp en UTC o None si no es parseable
    """
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith("z"):
        text = text[:-1] + "Z"

    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
            break
        except ValueError:
            continue
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_dates(doc: dict, fields):
    """Reemplaza los strings de fecha parseables; el resto queda intacto."""
    for field in fields:
        value = doc.get(field)
        if isinstance(value, str):
            parsed = parse_date(value)
            if parsed is not None:
                doc[field] = parsed


def start_document(raw: dict) -> dict:
    """Copia de trabajo del registro sin campos de control de Solr."""
    doc = dict(raw)
    drop_fields(doc, BOOKKEEPING_FIELDS)
    return doc
