"""
src/intern_core/ds/tuple.py
Tupla Internada: secuencia inmutable y canónica.
Dos tuplas estructuralmente equivalentes son el MISMO objeto,
por eso la igualdad es identidad.
"""
from collections.abc import Sequence
from typing import Any, Iterator, Tuple as PyTuple

from ..errors import ImmutabilityError


class Tuple(Sequence):
    """
    Secuencia congelada. No subclasifica tuple: CPython no admite
    referencias débiles a subclases de tuple.
    """
    __slots__ = ('_items', '_hash', '__weakref__')

    def __init__(self, items: PyTuple[Any, ...], structural_hash: int):
        object.__setattr__(self, '_items', items)
        object.__setattr__(self, '_hash', structural_hash)

    @property
    def structural_hash(self) -> int:
        return self._hash

    def __getitem__(self, index):
        # Un slice devuelve una tuple nativa (no internada)
        return self._items[index]

    def __len__(self):
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __reversed__(self) -> Iterator[Any]:
        return reversed(self._items)

    def __contains__(self, value):
        return value in self._items

    def to_tuple(self) -> PyTuple[Any, ...]:
        return self._items

    # --- Identidad ---
    def __eq__(self, other):
        return self is other

    def __ne__(self, other):
        return self is not other

    def __hash__(self):
        return self._hash

    # --- Inmutabilidad ---
    def __setitem__(self, index, value):
        raise ImmutabilityError("Tuple", f"asignar el índice {index!r}")

    def __delitem__(self, index):
        raise ImmutabilityError("Tuple", f"borrar el índice {index!r}")

    def __setattr__(self, name, value):
        raise ImmutabilityError("Tuple", f"asignar el atributo {name!r}")

    def __delattr__(self, name):
        raise ImmutabilityError("Tuple", f"borrar el atributo {name!r}")

    def __copy__(self):
        return self

    def __repr__(self):
        return f"Tuple{self._items!r}"
