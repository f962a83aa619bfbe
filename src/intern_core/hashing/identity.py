"""
src/intern_core/hashing/identity.py
Tabla Lateral de Hash por Identidad.
Memoriza un hash aleatorio estable por instancia sin retener la instancia.
"""
import threading
import weakref
from typing import Any, Callable, Dict, Tuple


class IdentityHashTable:
    """
    Mapa débil id(obj) -> (ref, hash).
    No usa WeakKeyDictionary: ese mapa delega en __eq__/__hash__ del objeto,
    y aquí dos objetos "iguales" deben tener hashes independientes.
    """
    __slots__ = ('_entries', '_lock', '_random', '__weakref__')

    def __init__(self, next_uint32: Callable[[], int]):
        self._entries: Dict[int, Tuple[weakref.ref, int]] = {}
        # RLock: el callback de una ref puede dispararse dentro de la sección crítica
        self._lock = threading.RLock()
        self._random = next_uint32

    def get(self, obj: Any) -> int:
        """Hash estable de 'obj'. El objeto debe admitir referencias débiles."""
        key = id(obj)
        entry = self._entries.get(key)
        if entry is not None and entry[0]() is obj:
            return entry[1]

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[0]() is obj:
                return entry[1]
            new_hash = self._random()
            ref = weakref.ref(obj, self._make_eviction(key))
            self._entries[key] = (ref, new_hash)
            return new_hash

    def _make_eviction(self, key: int) -> Callable[[weakref.ref], None]:
        table_ref = weakref.ref(self)

        def evict(dead_ref: weakref.ref) -> None:
            table = table_ref()
            if table is None:
                return
            with table._lock:
                entry = table._entries.get(key)
                # El id pudo reutilizarse por un objeto nuevo ya registrado
                if entry is not None and entry[0] is dead_ref:
                    del table._entries[key]

        return evict

    def __len__(self):
        return len(self._entries)

    def __contains__(self, obj: Any) -> bool:
        entry = self._entries.get(id(obj))
        return entry is not None and entry[0]() is obj
