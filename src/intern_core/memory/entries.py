"""
src/intern_core/memory/entries.py
Entradas Débiles de Bucket.
Una referencia débil que recuerda su hash y la generación de la cache
en la que fue insertada.
"""
import weakref
from typing import Any, Callable, Optional


class BucketEntry(weakref.ref):
    """
    weakref.ref con hash estructural adjunto (patrón KeyedRef).
    Igualdad y hash por IDENTIDAD de la entrada: dos entradas vivas de
    valores "iguales" nunca deben confundirse dentro de un set.
    """
    __slots__ = ('hash_value', 'generation')

    def __new__(cls, obj: Any, callback: Optional[Callable], hash_value: int, generation: int):
        self = super().__new__(cls, obj, callback)
        self.hash_value = hash_value
        self.generation = generation
        return self

    def __init__(self, obj: Any, callback: Optional[Callable], hash_value: int, generation: int):
        super().__init__(obj, callback)

    def __eq__(self, other):
        return self is other

    def __ne__(self, other):
        return self is not other

    def __hash__(self):
        return id(self)

    def __repr__(self):
        state = "dead" if self() is None else "live"
        return f"<BucketEntry {self.hash_value:#010x} gen={self.generation} {state}>"
