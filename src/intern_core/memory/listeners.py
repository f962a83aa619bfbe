"""
src/intern_core/memory/listeners.py
Registro de Observadores de Limpieza (diagnóstico y tests).
"""
import threading
from typing import Any, Callable, List

CleanupListener = Callable[[Any, int, Any], None]


class CleanupListeners:
    """
    Conjunto de callbacks notificados en cada eliminación de entrada.
    Registrar dos veces el mismo callback no lo duplica; el handle de
    baja puede llamarse varias veces sin efecto adicional.
    """
    __slots__ = ('_callbacks', '_lock')

    def __init__(self):
        # dict como set ordenado (orden de registro estable)
        self._callbacks: dict = {}
        self._lock = threading.Lock()

    def register(self, callback: CleanupListener) -> Callable[[], bool]:
        with self._lock:
            self._callbacks[callback] = None

        def deregister() -> bool:
            with self._lock:
                return self._callbacks.pop(callback, 0) is None

        return deregister

    def snapshot(self) -> List[CleanupListener]:
        with self._lock:
            return list(self._callbacks)

    def notify(self, cache: Any, hash_value: int, entry: Any) -> None:
        for callback in self.snapshot():
            callback(cache, hash_value, entry)

    def __len__(self):
        return len(self._callbacks)
