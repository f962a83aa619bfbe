"""
src/intern_core/ds/symbol.py
Tokens de Identidad Única.
Un Symbol solo es igual a sí mismo. Symbol.for_key() devuelve el token
registrado globalmente para una clave (mismo objeto en todo el proceso).
"""
import threading
from typing import Dict, Optional


class Symbol:
    """Token opaco comparado por identidad."""
    __slots__ = ('description', '_registered_key', '__weakref__')

    # Registro global: Clave -> Token (retención fuerte, vive todo el proceso)
    _registry: Dict[str, 'Symbol'] = {}
    _registry_lock = threading.Lock()

    def __init__(self, description: Optional[str] = None):
        self.description = description
        self._registered_key: Optional[str] = None

    @classmethod
    def for_key(cls, key: str) -> 'Symbol':
        """Recupera (o crea) el token registrado para 'key'."""
        if not isinstance(key, str):
            raise TypeError(f"La clave de registro debe ser str, no {type(key).__name__}")
        sym = cls._registry.get(key)
        if sym is not None:
            return sym
        with cls._registry_lock:
            sym = cls._registry.get(key)
            if sym is None:
                sym = cls(key)
                sym._registered_key = key
                cls._registry[key] = sym
            return sym

    @staticmethod
    def key_for(symbol: 'Symbol') -> Optional[str]:
        """Clave de registro del token, o None si no está registrado."""
        return symbol._registered_key

    @property
    def registered_key(self) -> Optional[str]:
        return self._registered_key

    def __repr__(self):
        if self._registered_key is not None:
            return f"Symbol.for_key({self._registered_key!r})"
        if self.description is None:
            return "Symbol()"
        return f"Symbol({self.description!r})"
