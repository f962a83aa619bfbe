"""
src/intern_core/kernel/sectors.py
Topología de Caches v1.1.
Un sector = un espacio de nombres de internado independiente
(tuplas, registros, y un sector por cada conjunto de claves proyectadas).

Los sectores proyectados viven mientras exista una fábrica que los use
o un registro internado en ellos; después se descartan.
"""
import logging
import threading
from typing import Any, Callable, Dict, Hashable, Optional

from ..memory.listeners import CleanupListener, CleanupListeners
from .cache import InternCache

logger = logging.getLogger(__name__)

TUPLE_SECTOR = "tuple"
RECORD_SECTOR = "record"

# Franjas de candados por sector; los sectores proyectados son más pequeños
DEFAULT_STRIPES = 64
PROJECTED_STRIPES = 16


def projected_sector(keys) -> tuple:
    return (RECORD_SECTOR, tuple(sorted(set(keys))))


class SectorManager:
    """
    Orquestador de Caches.
    Mapea claves de sector a InternCache; todas comparten observadores.
    """

    def __init__(self, stripes: int = DEFAULT_STRIPES):
        self._stripes = stripes
        self._sectors: Dict[Hashable, InternCache] = {}
        # Sector proyectado -> número de fábricas vivas que lo usan
        self._holders: Dict[Hashable, int] = {}
        # RLock: un callback de weakref (on_empty) puede llegar dentro de la sección crítica
        self._lock = threading.RLock()
        self.listeners = CleanupListeners()

    def get_cache(
        self,
        sector: Hashable,
        hash_fn: Callable[[Any], int],
        equivalent_fn: Callable[[Any, Any], bool],
    ) -> InternCache:
        cache = self._sectors.get(sector)
        if cache is not None:
            return cache
        with self._lock:
            return self._get_or_create(sector, hash_fn, equivalent_fn)

    def _get_or_create(self, sector, hash_fn, equivalent_fn) -> InternCache:
        cache = self._sectors.get(sector)
        if cache is None:
            projected = not isinstance(sector, str)
            stripes = min(self._stripes, PROJECTED_STRIPES) if projected else self._stripes
            cache = InternCache(
                hash_fn,
                equivalent_fn,
                name=f"Sector-{sector}",
                listeners=self.listeners,
                stripes=stripes,
                on_empty=self._cache_emptied if projected else None,
            )
            self._sectors[sector] = cache
            logger.debug("Sector %r creado (%d franjas)", sector, stripes)
        return cache

    # =========================================================================
    # SECTORES PROYECTADOS (ciclo de vida)
    # =========================================================================
    def acquire(
        self,
        sector: Hashable,
        hash_fn: Callable[[Any], int],
        equivalent_fn: Callable[[Any, Any], bool],
    ) -> InternCache:
        """Cache del sector, contando a quien la pide como fábrica viva."""
        with self._lock:
            cache = self._get_or_create(sector, hash_fn, equivalent_fn)
            self._holders[sector] = self._holders.get(sector, 0) + 1
            return cache

    def release(self, sector: Hashable) -> None:
        """Una fábrica del sector ha muerto."""
        with self._lock:
            remaining = self._holders.get(sector, 0) - 1
            if remaining > 0:
                self._holders[sector] = remaining
                return
            self._holders.pop(sector, None)
            cache = self._sectors.get(sector)
            if cache is not None:
                self._discard_if_idle(sector, cache)

    def _cache_emptied(self, cache: InternCache) -> None:
        with self._lock:
            for sector, candidate in list(self._sectors.items()):
                if candidate is cache:
                    self._discard_if_idle(sector, cache)
                    return

    def _discard_if_idle(self, sector: Hashable, cache: InternCache) -> None:
        # Sin fábricas nadie puede insertar: el tamaño solo decrece
        if self._holders.get(sector, 0) == 0 and cache.size() == 0:
            del self._sectors[sector]
            logger.debug("Sector %r descartado", sector)

    # =========================================================================
    # DIAGNÓSTICO
    # =========================================================================
    def find(self, sector: Hashable) -> Optional[InternCache]:
        return self._sectors.get(sector)

    def register_cleanup_listener(self, callback: CleanupListener) -> Callable[[], bool]:
        return self.listeners.register(callback)

    def stats(self) -> Dict[Hashable, Dict[str, Any]]:
        """Informe completo del estado de las caches."""
        return {sector: cache.stats() for sector, cache in list(self._sectors.items())}

    def __len__(self):
        return len(self._sectors)

    def reset(self):
        """
        UTILIDAD DE TEST: vacía todas las caches.
        ¡PELIGRO! Solo usar en setUp/tearDown de tests.
        """
        for cache in list(self._sectors.values()):
            cache.clear()
