"""
src/intern_core/kernel/equivalence.py
Predicados de Equivalencia v1.1.
Solo se invocan entre compuestos que ya comparten hash estructural:
deben ser exactos, el hash solo agrupa.
"""
from collections.abc import Mapping
from typing import Any, Iterable, Protocol, Sequence, Tuple

from ..categories import CategoryTraits, ValueCategory, classify, get_traits
from ..config import ZeroPolicy
from ..hashing.canonization import Canonizer


class Equivalence(Protocol):
    def __call__(self, a: Any, b: Any) -> bool: ...


class ElementPolicy:
    """
    Política de igualdad por elemento:
    identidad, o misma categoría con el mismo valor.
    NaN ~ NaN siempre; +0.0 ~ -0.0 según ZeroPolicy.
    """
    __slots__ = ('zero_policy',)

    def __init__(self, zero_policy: ZeroPolicy = ZeroPolicy.EQUAL):
        self.zero_policy = zero_policy

    def elements_equivalent(self, a: Any, b: Any) -> bool:
        if a is b:
            return True
        category = classify(a)
        if category is not classify(b):
            return False
        if not get_traits(category) & CategoryTraits.VALUE_COMPARED:
            # Tokens, referencias y singletons: solo identidad
            return False

        if category is ValueCategory.FLOAT:
            if a != a:
                return b != b
            if a != b:
                return False
            if a == 0.0 and self.zero_policy is ZeroPolicy.DISTINCT:
                return Canonizer.zero_sign(a) == Canonizer.zero_sign(b)
            return True
        if category is ValueCategory.TEXT:
            return str.__eq__(a, b)
        return int.__eq__(a, b)

    def tuples_equivalent(self, a: Sequence[Any], b: Sequence[Any]) -> bool:
        """Misma longitud y elementos equivalentes posición a posición."""
        if len(a) != len(b):
            return False
        eq = self.elements_equivalent
        for x, y in zip(a, b):
            if not eq(x, y):
                return False
        return True

    def records_equivalent(self, a: Mapping, b: Mapping) -> bool:
        """Mismo conjunto de claves y valores equivalentes por clave."""
        if len(a) != len(b):
            return False
        eq = self.elements_equivalent
        for key, value in a.items():
            if key not in b:
                return False
            if not eq(value, b[key]):
                return False
        return True


class ProjectionPolicy:
    """
    Equivalencia restringida a un subconjunto fijo de claves.
    Las claves fuera del subconjunto se ignoran; las del subconjunto
    se comparan como una tupla ordenada.
    """
    __slots__ = ('keys', '_elements')

    def __init__(self, keys: Iterable[str], elements: ElementPolicy):
        self.keys: Tuple[str, ...] = tuple(sorted(set(keys)))
        self._elements = elements

    @staticmethod
    def read(source: Any, key: str) -> Any:
        return Canonizer.read_key(source, key)

    def project(self, source: Any) -> Tuple[Any, ...]:
        return Canonizer.project(source, self.keys)

    def equivalent(self, a: Any, b: Any) -> bool:
        return self._elements.tuples_equivalent(self.project(a), self.project(b))
