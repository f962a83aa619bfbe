from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import os

from .errors import ConfigError


class ZeroPolicy(Enum):
    """Trato de +0.0 / -0.0 (mismo criterio en hash y en equivalencia)."""

    EQUAL = "equal"
    DISTINCT = "distinct"


@dataclass(frozen=True, slots=True)
class InternConfig:
    """Configuración del internado estructural.

    `seed` fija el generador de valores aleatorios por ejecución; None usa
    el reloj. `lock_stripes` debe ser potencia de dos.
    """

    zero_policy: ZeroPolicy = ZeroPolicy.EQUAL
    seed: int | None = None
    lock_stripes: int = 64

    def __post_init__(self) -> None:
        if not isinstance(self.zero_policy, ZeroPolicy):
            raise ConfigError("zero_policy", self.zero_policy, "se esperaba ZeroPolicy")
        stripes = self.lock_stripes
        if stripes < 1 or stripes & (stripes - 1):
            raise ConfigError("lock_stripes", stripes, "debe ser potencia de dos")

    @staticmethod
    def from_env() -> "InternConfig":
        raw_policy = os.environ.get("INTERN_ZERO_POLICY", "").strip().lower()
        try:
            zero_policy = ZeroPolicy(raw_policy) if raw_policy else ZeroPolicy.EQUAL
        except ValueError:
            raise ConfigError(
                "INTERN_ZERO_POLICY", raw_policy, "valores válidos: equal, distinct"
            ) from None
        seed = _int_from_env("INTERN_HASH_SEED")
        stripes = _int_from_env("INTERN_LOCK_STRIPES")
        return InternConfig(
            zero_policy=zero_policy,
            seed=seed,
            lock_stripes=64 if stripes is None else stripes,
        )


def _int_from_env(name: str) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw, 0)
    except ValueError:
        raise ConfigError(name, raw, "se esperaba un entero") from None


DEFAULT_INTERN_CONFIG = InternConfig.from_env()


__all__ = ["ZeroPolicy", "InternConfig", "DEFAULT_INTERN_CONFIG"]
