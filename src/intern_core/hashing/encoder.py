"""
src/intern_core/hashing/encoder.py
Motor de Hash Estructural v1.3.
Proyecta cualquier valor a un uint32 con reglas por categoría:
- Texto: unidades UTF-16, dos por palabra.
- Float: patrón IEEE-754 (64 bits) en dos palabras, canonizado.
- Entero: dígitos base 2^32 (Little Endian) del residuo no negativo.
- Tokens y referencias: hash aleatorio estable por instancia.
Determinista dentro de una ejecución; NO estable entre ejecuciones.
"""
import struct
from typing import Any, Iterable, Iterator, Tuple

from ..categories import ValueCategory, classify
from ..config import DEFAULT_INTERN_CONFIG, InternConfig
from ..errors import UnhashableCategoryError
from .canonization import Canonizer
from .identity import IdentityHashTable
from .invariants import HashSeeds, MASK_32, BITS_WORD
from .utils import murmur3_mix, lcg_stream

_DOUBLE_BE = struct.Struct('>d')
_WORD_PAIR_BE = struct.Struct('>II')

# =============================================================================
# EMPAQUETADO A PALABRAS uint32
# =============================================================================

def text_words(value: str) -> Tuple[int, ...]:
    """
    Unidades de código UTF-16 empaquetadas de dos en dos: (c2 << 16) | c1.
    Longitud impar -> la última unidad se completa con 0.
    """
    data = value.encode('utf-16-le', 'surrogatepass')
    if len(data) % 4:
        data += b'\x00\x00'
    return struct.unpack(f'<{len(data) // 4}I', data)


def float_words(value: float) -> Tuple[int, int]:
    return _WORD_PAIR_BE.unpack(_DOUBLE_BE.pack(value))


def integer_words(value: int) -> Iterator[int]:
    """
    Dígitos base 2^32 del residuo no negativo, truncando hacia cero.
    0 no produce palabras (el conteo ya lo distingue).
    """
    magnitude = -value if value < 0 else value
    while magnitude:
        digit = magnitude & MASK_32
        yield digit if value > 0 else (-digit) & MASK_32
        magnitude >>= BITS_WORD


class StructuralHasher:
    """
    Función de hash estructural con semillas propias.
    Una instancia por configuración: las semillas se generan aquí,
    no como globales ocultas.
    """
    __slots__ = ('seeds', 'zero_policy', '_random', '_identity')

    def __init__(self, config: InternConfig = DEFAULT_INTERN_CONFIG):
        self._random = lcg_stream(config.seed)
        self.seeds = HashSeeds(self._random)
        self.zero_policy = config.zero_policy
        self._identity = IdentityHashTable(self._random)

    # --- Valores Individuales ---

    def value_hash(self, value: Any) -> int:
        category = classify(value)
        seeds = self.seeds

        if category is ValueCategory.TEXT:
            return murmur3_mix(text_words(value), seeds.text)
        if category is ValueCategory.FLOAT:
            canonical = Canonizer.canonical_float(value, self.zero_policy)
            return murmur3_mix(float_words(canonical), seeds.float)
        if category is ValueCategory.INTEGER:
            return murmur3_mix(integer_words(value), seeds.integer)
        if category is ValueCategory.BOOLEAN:
            return seeds.true if value else seeds.false
        if category is ValueCategory.NULL:
            return seeds.null
        if category is ValueCategory.UNDEFINED:
            return seeds.undefined
        if category is ValueCategory.REGISTERED_SYMBOL:
            return murmur3_mix(text_words(value.registered_key), seeds.registered_symbol)
        if category is ValueCategory.SYMBOL or category is ValueCategory.REFERENCE:
            return self.identity_hash(value)

        raise UnhashableCategoryError(category, type(value).__name__)

    def identity_hash(self, value: Any) -> int:
        """
        Hash aleatorio estable por instancia (tabla lateral débil).
        Objetos sin soporte de weakref (object(), list, tuple...) usan su id(),
        estable mientras vivan, mezclado con la semilla de referencias.
        """
        try:
            return self._identity.get(value)
        except TypeError:
            return murmur3_mix(integer_words(id(value)), self.seeds.reference)

    # --- Compuestos ---

    def tuple_hash(self, elements: Iterable[Any]) -> int:
        return murmur3_mix((self.value_hash(e) for e in elements), self.seeds.tuple)

    def record_hash(self, items: Iterable[Tuple[str, Any]]) -> int:
        """Pares (hash clave, hash valor) intercalados y ordenados por clave."""
        return murmur3_mix(self._key_and_value_hashes(items), self.seeds.record)

    def _key_and_value_hashes(self, items: Iterable[Tuple[str, Any]]) -> Iterator[int]:
        for key, value in Canonizer.sort_record_items(items):
            yield self.value_hash(key)
            yield self.value_hash(value)
