"""
src/intern_core/categories.py
Ontología de Valores v1.2.
Define las Categorías de Elementos y sus Leyes de Comparación.
"""
from enum import IntEnum, IntFlag
from typing import Any

from .ds.symbol import Symbol


class _UndefinedType:
    """Ausencia de valor distinta de None (Singleton)."""
    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNDEFINED"

    def __bool__(self):
        return False

    def __reduce__(self):
        return (_UndefinedType, ())


UNDEFINED = _UndefinedType()

# =============================================================================
# LEYES DE COMPARACIÓN
# =============================================================================
class CategoryTraits(IntFlag):
    NONE            = 0
    VALUE_COMPARED  = 1 << 0  # a ~ b si mismo valor (str, float, int)
    IDENTITY_HASHED = 1 << 1  # Hash aleatorio estable por instancia
    SINGLETON       = 1 << 2  # Una sola instancia posible (None, bool)

# =============================================================================
# CATEGORÍAS (Tipos de Elemento)
# =============================================================================
class ValueCategory(IntEnum):
    TEXT              = 0x01
    FLOAT             = 0x02
    INTEGER           = 0x03
    BOOLEAN           = 0x04
    SYMBOL            = 0x10  # Token único sin registro
    REGISTERED_SYMBOL = 0x11  # Token registrado por clave (Symbol.for_key)
    NULL              = 0x20
    UNDEFINED         = 0x21
    REFERENCE         = 0x30  # Objeto opaco (identidad)


TRAITS_REGISTRY = {
    ValueCategory.TEXT:              CategoryTraits.VALUE_COMPARED,
    ValueCategory.FLOAT:             CategoryTraits.VALUE_COMPARED,
    ValueCategory.INTEGER:           CategoryTraits.VALUE_COMPARED,
    ValueCategory.BOOLEAN:           CategoryTraits.SINGLETON,
    ValueCategory.SYMBOL:            CategoryTraits.IDENTITY_HASHED,
    # Vital: la clave hace el hash, pero el registro garantiza una instancia.
    ValueCategory.REGISTERED_SYMBOL: CategoryTraits.SINGLETON,
    ValueCategory.NULL:              CategoryTraits.SINGLETON,
    ValueCategory.UNDEFINED:         CategoryTraits.SINGLETON,
    ValueCategory.REFERENCE:         CategoryTraits.IDENTITY_HASHED,
}


def get_traits(category: ValueCategory) -> CategoryTraits:
    """Retorna las leyes de comparación de la categoría."""
    return TRAITS_REGISTRY.get(category, CategoryTraits.NONE)


def classify(value: Any) -> ValueCategory:
    """
    Despacho exhaustivo de un valor a su categoría.
    El orden importa: bool es subclase de int.
    """
    if value is None:
        return ValueCategory.NULL
    if value is UNDEFINED:
        return ValueCategory.UNDEFINED
    if isinstance(value, bool):
        return ValueCategory.BOOLEAN
    if isinstance(value, str):
        return ValueCategory.TEXT
    if isinstance(value, float):
        return ValueCategory.FLOAT
    if isinstance(value, int):
        return ValueCategory.INTEGER
    if isinstance(value, Symbol):
        if value.registered_key is not None:
            return ValueCategory.REGISTERED_SYMBOL
        return ValueCategory.SYMBOL
    return ValueCategory.REFERENCE
