from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class InternError(Exception):
    """Raíz de todos los errores del núcleo de internado."""


@dataclass(frozen=True)
class CacheCorruptionError(InternError, RuntimeError):
    """Invariante rota entre un bucket y su entrada débil. Fatal."""

    cache: str
    hash_value: int
    detail: str

    def __str__(self) -> str:
        return (
            f"CRITICAL: Cache '{self.cache}' corrupta en el bucket "
            f"{self.hash_value:#010x}: {self.detail}"
        )


@dataclass(frozen=True)
class UnhashableCategoryError(InternError, TypeError):
    """Categoría de valor no reconocida por el hash estructural. Fatal."""

    category: Any
    value_type: str

    def __str__(self) -> str:
        return f"CRITICAL: Categoría {self.category!r} sin regla de hash (tipo {self.value_type})"


@dataclass(frozen=True)
class ImmutabilityError(InternError, TypeError):
    """Intento de escritura sobre un valor internado."""

    target: str
    operation: str

    def __str__(self) -> str:
        return f"{self.target} internado es inmutable: {self.operation} no permitido"


@dataclass(frozen=True)
class ConfigError(InternError, ValueError):
    """Valor de configuración inválido."""

    setting: str
    value: Any
    reason: str

    def __str__(self) -> str:
        return f"Configuración inválida {self.setting}={self.value!r}: {self.reason}"


__all__ = [
    "InternError",
    "CacheCorruptionError",
    "UnhashableCategoryError",
    "ImmutabilityError",
    "ConfigError",
]
