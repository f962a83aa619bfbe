"""
src/intern_core/ds/record.py
Registro Internado: mapping inmutable de claves de texto a valores.
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterator

from ..errors import ImmutabilityError


class Record(Mapping):
    """
    Mapping congelado y canónico.
    Record vs Record: identidad (el internado ya unificó los equivalentes).
    Record vs Mapping no hashable (dict): igualdad de contenido.
    Record vs Mapping hashable: identidad (su hash no es el estructural).
    """
    __slots__ = ('_data', '_hash', '__weakref__')

    def __init__(self, data: Dict[str, Any], structural_hash: int):
        object.__setattr__(self, '_data', data)
        object.__setattr__(self, '_hash', structural_hash)

    @property
    def structural_hash(self) -> int:
        return self._hash

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __contains__(self, key):
        return key in self._data

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __eq__(self, other):
        if self is other:
            return True
        if isinstance(other, Record):
            return False
        # Solo mappings no hashables (dict): uno hashable igual por contenido
        # rompería la ley a == b -> hash(a) == hash(b)
        if isinstance(other, Mapping):
            if getattr(type(other), '__hash__', None) is not None:
                return False
            return self._data == dict(other.items())
        return NotImplemented

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self):
        return self._hash

    # --- Inmutabilidad ---
    def __setitem__(self, key, value):
        raise ImmutabilityError("Record", f"asignar la clave {key!r}")

    def __delitem__(self, key):
        raise ImmutabilityError("Record", f"borrar la clave {key!r}")

    def __setattr__(self, name, value):
        raise ImmutabilityError("Record", f"asignar el atributo {name!r}")

    def __delattr__(self, name):
        raise ImmutabilityError("Record", f"borrar el atributo {name!r}")

    def __copy__(self):
        return self

    def __repr__(self):
        return f"Record({self._data!r})"
