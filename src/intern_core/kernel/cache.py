"""
src/intern_core/kernel/cache.py
Cache de Internado (Hash Consing) v2.1.
Hash estructural -> Bucket de referencias débiles.

GARANTÍAS:
- get_or_insert es de un solo ganador: dos candidatos equivalentes en
  carrera producen UNA referencia canónica.
- La cache nunca retiene fuertemente un valor internado.
- Un bucket vacío se elimina en el acto.
- Cada valor internado se retira exactamente una vez, cuando muere
  su última referencia externa (callback de weakref).
"""
import logging
import threading
import weakref
from typing import Any, Callable, Dict, Generic, List, Optional, Set, TypeVar

from ..errors import CacheCorruptionError
from .equivalence import Equivalence
from ..memory.entries import BucketEntry
from ..memory.listeners import CleanupListener, CleanupListeners

logger = logging.getLogger(__name__)

T = TypeVar('T')


class InternCache(Generic[T]):
    """
    Tabla de hash consing genérica.
    hash_fn calcula el hash estructural (uint32) de un candidato;
    equivalent_fn resuelve colisiones de forma exacta.
    """

    def __init__(
        self,
        hash_fn: Callable[[T], int],
        equivalent_fn: Equivalence,
        name: str = "InternCache",
        listeners: Optional[CleanupListeners] = None,
        stripes: int = 64,
        on_empty: Optional[Callable[['InternCache'], None]] = None,
    ):
        if stripes < 1 or stripes & (stripes - 1):
            raise ValueError(f"stripes debe ser potencia de dos, no {stripes}")
        self.name = name
        self._hash_fn = hash_fn
        self._equivalent = equivalent_fn
        self._listeners = listeners if listeners is not None else CleanupListeners()
        # Aviso (fuera de candados) cuando la cache queda sin buckets
        self._on_empty = on_empty

        # Hash -> Bucket (set de BucketEntry)
        self._buckets: Dict[int, Set[BucketEntry]] = {}

        # Candados por franja: exclusión por bucket sin contención global.
        # RLock: un ciclo recogido por gc dentro de la sección crítica dispara
        # _reclaim en el mismo hilo, que vuelve a tomar la misma franja.
        # Ninguna sección crítica suelta la última referencia a un valor.
        self._stripe_mask = stripes - 1
        self._stripes = [threading.RLock() for _ in range(stripes)]

        self._generation = 0
        self._reclaim_cb = self._make_reclaim_callback()

    # =========================================================================
    # GET OR INSERT
    # =========================================================================
    def get_or_insert(self, candidate: T) -> T:
        """
        Devuelve el valor canónico equivalente a 'candidate'.
        Si no existe, 'candidate' pasa a ser el canónico.
        Si existe, 'candidate' se descarta sin quedar referenciado.
        """
        hash_value = self._hash_fn(candidate)
        # Referencias fuertes tomadas en el escaneo. Se sueltan al salir de la
        # función, ya sin la franja: soltar la última referencia a un valor
        # dispara _reclaim de sus elementos internados, que pueden estar en otra franja.
        held: List[T] = []

        with self._lock_for(hash_value):
            bucket = self._buckets.get(hash_value)
            if bucket is not None:
                existing = self._scan(bucket, candidate, held)
                if existing is not None:
                    return existing

                # Re-lectura: el escaneo pudo vaciar y borrar el bucket
                bucket = self._buckets.get(hash_value)

            if bucket is None:
                bucket = set()
                self._buckets[hash_value] = bucket
                logger.debug("%s: bucket %#010x creado", self.name, hash_value)

            bucket.add(BucketEntry(candidate, self._reclaim_cb, hash_value, self._generation))
            return candidate

    def lookup(self, candidate: T) -> Optional[T]:
        """Consulta sin inserción. None si no hay equivalente vivo."""
        hash_value = self._hash_fn(candidate)
        held: List[T] = []
        with self._lock_for(hash_value):
            bucket = self._buckets.get(hash_value)
            if bucket is None:
                return None
            return self._scan(bucket, candidate, held)

    def _scan(self, bucket: Set[BucketEntry], candidate: T, held: List[T]) -> Optional[T]:
        """
        Primer miembro vivo equivalente a 'candidate', o None.
        Cada valor desreferenciado queda en 'held': el llamador lo suelta
        fuera de la sección crítica.
        """
        # Copia: una entrada puede morir (y salir del bucket) durante el escaneo
        for entry in tuple(bucket):
            existing = entry()
            if existing is None:
                continue
            held.append(existing)
            if self._equivalent(existing, candidate):
                return existing
        return None

    def __contains__(self, value: Any) -> bool:
        """True si 'value' ES (por identidad) un canónico de esta cache."""
        try:
            hash_value = self._hash_fn(value)
        except (AttributeError, TypeError):
            return False
        bucket = self._buckets.get(hash_value)
        if bucket is None:
            return False
        return any(entry() is value for entry in tuple(bucket))

    # =========================================================================
    # LIFECYCLE
    # =========================================================================
    def _make_reclaim_callback(self) -> Callable[[BucketEntry], None]:
        # La cache no debe vivir por culpa de sus propias entradas
        cache_ref = weakref.ref(self)

        def reclaim(entry: BucketEntry) -> None:
            cache = cache_ref()
            if cache is not None:
                cache._reclaim(entry)

        return reclaim

    def _reclaim(self, entry: BucketEntry) -> None:
        """
        Retira una entrada muerta de su bucket. Invocado una sola vez por
        valor internado. Entrada ausente = corrupción (fatal).

        Desde el callback de weakref, CPython no propaga la excepción:
        la reporta por sys.unraisablehook. El log CRITICAL previo es la
        señal primaria en producción.
        """
        hash_value = entry.hash_value
        emptied = False
        with self._lock_for(hash_value):
            if entry.generation != self._generation:
                # Entrada de una generación desacoplada por clear()
                return
            bucket = self._buckets.get(hash_value)
            if bucket is None:
                self._corruption(hash_value, "no existe el bucket de la entrada")
            try:
                bucket.remove(entry)
            except KeyError:
                self._corruption(hash_value, "la entrada débil no está en su bucket")
            if not bucket:
                del self._buckets[hash_value]
                logger.debug("%s: bucket %#010x eliminado", self.name, hash_value)
                emptied = not self._buckets

        self._listeners.notify(self, hash_value, entry)
        if emptied and self._on_empty is not None:
            self._on_empty(self)

    def _corruption(self, hash_value: int, detail: str) -> None:
        error = CacheCorruptionError(self.name, hash_value, detail)
        logger.critical("%s", error)
        raise error

    def clear(self) -> None:
        """
        UTILIDAD DE TEST: olvida todas las entradas.
        Los callbacks pendientes de entradas anteriores se ignoran.
        """
        for lock in self._stripes:
            lock.acquire()
        try:
            self._generation += 1
            self._buckets = {}
        finally:
            for lock in reversed(self._stripes):
                lock.release()

    # =========================================================================
    # OBSERVADORES
    # =========================================================================
    def register_cleanup_listener(self, callback: CleanupListener) -> Callable[[], bool]:
        """Registra un observador de eliminaciones. Devuelve el handle de baja."""
        return self._listeners.register(callback)

    # =========================================================================
    # INTROSPECCIÓN
    # =========================================================================
    def size(self) -> int:
        """
        Suma de cardinalidades de los buckets. Puede contar entradas ya
        muertas pero aún no barridas. Solo para diagnóstico.
        """
        return sum(len(bucket) for bucket in list(self._buckets.values()))

    def __len__(self):
        return self.size()

    def bucket_count(self) -> int:
        return len(self._buckets)

    def stats(self) -> Dict[str, Any]:
        """Introspección para monitoreo de salud."""
        entries = 0
        pending = 0
        largest = 0
        buckets: List[Set[BucketEntry]] = list(self._buckets.values())
        for bucket in buckets:
            members = tuple(bucket)
            entries += len(members)
            pending += sum(1 for entry in members if entry() is None)
            largest = max(largest, len(members))
        return {
            "name": self.name,
            "buckets": len(buckets),
            "entries": entries,
            "pending": pending,
            "largest_bucket": largest,
        }

    def _lock_for(self, hash_value: int) -> threading.RLock:
        return self._stripes[hash_value & self._stripe_mask]

    def __repr__(self):
        return f"<InternCache {self.name!r} entries={self.size()}>"
