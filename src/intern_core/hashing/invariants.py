"""
src/intern_core/hashing/invariants.py
Geometría del Hash Estructural (32 bits) y Semillas por Ejecución.
"""
from typing import Callable

# =============================================================================
# LAYOUT DE PALABRA (uint32)
# =============================================================================
BITS_WORD   = 32
MASK_32     = 0xFFFFFFFF
UINT32_BASE = 1 << BITS_WORD

# =============================================================================
# CONSTANTES MURMURHASH3 (x86_32)
# =============================================================================
MURMUR_C1      = 0xCC9E2D51
MURMUR_C2      = 0x1B873593
MURMUR_N       = 0xE6546B64
FMIX_PRIME_1   = 0x85EBCA6B
FMIX_PRIME_2   = 0xC2B2AE35
BYTES_PER_WORD = 4

# Generador Congruencial Lineal (Numerical Recipes)
LCG_MULTIPLIER = 1664525
LCG_INCREMENT  = 1013904223


class HashSeeds:
    """
    Semillas aleatorias fijadas una sola vez por ejecución.
    Cada categoría recibe su propia etiqueta para separar dominios
    (el texto "1" y el entero 1 no deben mezclarse igual).
    """
    __slots__ = (
        'tuple', 'record', 'null', 'undefined', 'false', 'true',
        'float', 'integer', 'text', 'registered_symbol', 'reference',
    )

    def __init__(self, next_uint32: Callable[[], int]):
        # El orden de extracción es parte del contrato (reproducible con semilla fija)
        self.tuple = next_uint32()
        self.record = next_uint32()
        self.null = next_uint32()
        self.undefined = next_uint32()
        self.false = next_uint32()
        self.true = next_uint32()
        self.float = next_uint32()
        self.integer = next_uint32()
        self.text = next_uint32()
        self.registered_symbol = next_uint32()
        self.reference = next_uint32()

    def __repr__(self):
        fields = ", ".join(f"{name}={getattr(self, name):#010x}" for name in self.__slots__)
        return f"<HashSeeds {fields}>"
