"""
src/intern_core/kernel/facade.py
Fachada Pública v1.2.
intern_tuple / intern_record / intern_record_projected_on_keys:
congelan la entrada, calculan su hash estructural y delegan en la cache.
"""
import operator
import weakref
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Optional

from ..config import DEFAULT_INTERN_CONFIG, InternConfig
from ..ds.record import Record
from ..ds.tuple import Tuple
from ..hashing.canonization import MISSING
from ..hashing.encoder import StructuralHasher
from ..memory.listeners import CleanupListener
from .cache import InternCache
from .equivalence import ElementPolicy, ProjectionPolicy
from .sectors import RECORD_SECTOR, TUPLE_SECTOR, SectorManager, projected_sector

_structural_hash = operator.attrgetter('structural_hash')


def _text_keys(data: Dict[Any, Any]) -> Dict[str, Any]:
    for key in data:
        if not isinstance(key, str):
            raise TypeError(f"Las claves de un Record deben ser str, no {type(key).__name__}")
    return data


class Interner:
    """
    Espacio de internado completo: hash, política de igualdad y caches.
    Dos Interner distintos nunca comparten valores canónicos.
    """

    def __init__(self, config: InternConfig = DEFAULT_INTERN_CONFIG):
        self.config = config
        self.hasher = StructuralHasher(config)
        self.elements = ElementPolicy(config.zero_policy)
        self.sectors = SectorManager(config.lock_stripes)
        self.tuple_cache: InternCache = self.sectors.get_cache(
            TUPLE_SECTOR, _structural_hash, self.elements.tuples_equivalent
        )
        self.record_cache: InternCache = self.sectors.get_cache(
            RECORD_SECTOR, _structural_hash, self.elements.records_equivalent
        )

    # --- Tuplas ---
    def intern_tuple(self, elements: Iterable[Any]) -> Tuple:
        if isinstance(elements, Tuple) and elements in self.tuple_cache:
            return elements
        items = tuple(elements)
        candidate = Tuple(items, self.hasher.tuple_hash(items))
        return self.tuple_cache.get_or_insert(candidate)

    def tuple_of(self, *elements: Any) -> Tuple:
        return self.intern_tuple(elements)

    # --- Registros ---
    def intern_record(self, mapping: Optional[Any] = None, /, **fields: Any) -> Record:
        if isinstance(mapping, Record) and not fields and mapping in self.record_cache:
            return mapping
        data = _text_keys(dict(mapping or (), **fields))
        candidate = Record(data, self.hasher.record_hash(data.items()))
        return self.record_cache.get_or_insert(candidate)

    def intern_record_projected_on_keys(self, keys: Iterable[str]) -> 'KeyedRecordType':
        return KeyedRecordType(self, keys)

    def record_type(self, *keys: str) -> 'KeyedRecordType':
        return KeyedRecordType(self, keys)

    # --- Diagnóstico ---
    def register_cleanup_listener(self, callback: CleanupListener) -> Callable[[], bool]:
        return self.sectors.register_cleanup_listener(callback)

    def cache_size(self) -> int:
        return sum(stats["entries"] for stats in self.sectors.stats().values())


class KeyedRecordType:
    """
    Fábrica de registros internados sobre un subconjunto fijo de claves.
    Lee las claves de un mapping o como atributos de cualquier objeto
    (incluidos los heredados). Las claves ausentes se omiten.
    """
    __slots__ = ('keys', '_interner', '_policy', '_cache', '__weakref__')

    def __init__(self, interner: Interner, keys: Iterable[str]):
        if isinstance(keys, str):
            keys = (keys,)
        declared = tuple(dict.fromkeys(keys))
        _text_keys(dict.fromkeys(declared))
        self.keys = declared
        self._interner = interner
        self._policy = ProjectionPolicy(declared, interner.elements)
        sector = projected_sector(declared)
        self._cache: InternCache = interner.sectors.acquire(
            sector, _structural_hash, self._policy.equivalent
        )
        # El sector se descarta cuando muere la última fábrica y su último registro
        release = weakref.finalize(self, interner.sectors.release, sector)
        release.atexit = False

    @property
    def cache(self) -> InternCache:
        return self._cache

    def __call__(self, source: Optional[Any] = None, /, **fields: Any) -> Record:
        if fields:
            if source is not None and not isinstance(source, Mapping):
                raise TypeError("Solo un Mapping admite campos adicionales por nombre")
            source = dict(source or (), **fields)
        elif source is None:
            source = {}
        data = {}
        for key in self.keys:
            value = self._policy.read(source, key)
            if value is not MISSING:
                data[key] = value
        candidate = Record(data, self._interner.hasher.record_hash(data.items()))
        return self._cache.get_or_insert(candidate)

    def __repr__(self):
        return f"<KeyedRecordType keys={self.keys!r}>"


# =============================================================================
# INTERNER POR DEFECTO (API de módulo)
# =============================================================================
_DEFAULT_INTERNER = Interner()


def default_interner() -> Interner:
    return _DEFAULT_INTERNER


def intern_tuple(elements: Iterable[Any]) -> Tuple:
    """Tupla canónica para la secuencia ordenada 'elements'."""
    return _DEFAULT_INTERNER.intern_tuple(elements)


def tuple_of(*elements: Any) -> Tuple:
    return _DEFAULT_INTERNER.intern_tuple(elements)


def intern_record(mapping: Optional[Any] = None, /, **fields: Any) -> Record:
    """Registro canónico para el mapping clave -> valor."""
    return _DEFAULT_INTERNER.intern_record(mapping, **fields)


def intern_record_projected_on_keys(keys: Iterable[str]) -> KeyedRecordType:
    return _DEFAULT_INTERNER.intern_record_projected_on_keys(keys)


def record_type(*keys: str) -> KeyedRecordType:
    return _DEFAULT_INTERNER.record_type(*keys)


def register_cleanup_listener(callback: CleanupListener) -> Callable[[], bool]:
    """Observador de eliminaciones en todas las caches del interner por defecto."""
    return _DEFAULT_INTERNER.register_cleanup_listener(callback)


def tuple_cache() -> InternCache:
    return _DEFAULT_INTERNER.tuple_cache


def record_cache() -> InternCache:
    return _DEFAULT_INTERNER.record_cache
