"""
src/intern_core/hashing/canonization.py
Motor de Normalización Canónica.
Garantiza que entradas equivalentes produzcan exactamente las mismas palabras de hash.
"""
import math
from collections.abc import Mapping
from typing import Any, Iterable, List, Tuple

from ..config import ZeroPolicy


class _Missing:
    """Marcador de clave ausente en una proyección."""
    __slots__ = ()

    def __repr__(self):
        return "<MISSING>"


MISSING = _Missing()


class Canonizer:
    """
    Normaliza floats, ordena registros y proyecta claves.
    """

    @staticmethod
    def canonical_float(value: float, zero_policy: ZeroPolicy) -> float:
        """
        NaN tiene muchos patrones de bits: se colapsan en uno solo.
        -0.0 colapsa en +0.0 solo bajo ZeroPolicy.EQUAL.
        """
        if value != value:
            return math.nan
        if value == 0.0 and zero_policy is ZeroPolicy.EQUAL:
            return 0.0
        return float(value)

    @staticmethod
    def zero_sign(value: float) -> float:
        return math.copysign(1.0, value)

    @staticmethod
    def sort_record_items(items: Iterable[Tuple[str, Any]]) -> List[Tuple[str, Any]]:
        """
        Orden estricto por clave: el hash no depende del orden de inserción.
        """
        return sorted(items, key=lambda kv: kv[0])

    @staticmethod
    def read_key(source: Any, key: str) -> Any:
        """
        Lee 'key' de un mapping, o como atributo de cualquier otro objeto
        (incluidos atributos heredados de la clase). MISSING si no existe.
        """
        if isinstance(source, Mapping):
            return source[key] if key in source else MISSING
        return getattr(source, key, MISSING)

    @staticmethod
    def project(source: Any, keys: Tuple[str, ...]) -> Tuple[Any, ...]:
        """Valores de 'keys' (ya ordenadas) en orden; MISSING para las ausentes."""
        return tuple(Canonizer.read_key(source, k) for k in keys)
