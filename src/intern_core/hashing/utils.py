"""
src/intern_core/hashing/utils.py
Utilidades de bajo nivel: aritmética uint32, acumulador MurmurHash3
y generador pseudoaleatorio por ejecución.
"""
import threading
import time
from typing import Callable, Iterable, Optional

from .invariants import (
    MASK_32, MURMUR_C1, MURMUR_C2, MURMUR_N, FMIX_PRIME_1, FMIX_PRIME_2,
    BYTES_PER_WORD, LCG_MULTIPLIER, LCG_INCREMENT,
)


def rotl32(x: int, r: int) -> int:
    return ((x << r) | (x >> (32 - r))) & MASK_32


def imul32(a: int, b: int) -> int:
    """Multiplicación con desbordamiento de 32 bits (Unsigned)."""
    return (a * b) & MASK_32


def fmix32(h: int) -> int:
    """
    Avalanche Finalizer de MurmurHash3.
    Un bit distinto en la entrada cambia ~16 bits de la salida.
    """
    h ^= h >> 16
    h = (h * FMIX_PRIME_1) & MASK_32
    h ^= h >> 13
    h = (h * FMIX_PRIME_2) & MASK_32
    h ^= h >> 16
    return h


def murmur3_mix(words: Iterable[int], seed: int = 0) -> int:
    """
    Acumulador MurmurHash3 (x86_32) sobre palabras de 32 bits.
    Sensible al orden y al número de palabras (el conteo se pliega al final).
    """
    h = seed & MASK_32
    count = 0
    for k in words:
        count += 1
        k = (k & MASK_32) * MURMUR_C1 & MASK_32
        k = rotl32(k, 15)
        k = k * MURMUR_C2 & MASK_32

        h ^= k
        h = rotl32(h, 13)
        h = (h * 5 + MURMUR_N) & MASK_32

    # Longitud en bytes de la entrada
    h ^= (count * BYTES_PER_WORD) & MASK_32
    return fmix32(h)


def lcg_stream(seed: Optional[int] = None) -> Callable[[], int]:
    """
    Generador Congruencial Lineal uint32, seguro entre hilos.
    Sin semilla se toma el reloj (valores distintos en cada ejecución).
    """
    if seed is None:
        seed = time.time_ns()
    state = seed & MASK_32
    lock = threading.Lock()

    def next_uint32() -> int:
        nonlocal state
        with lock:
            state = (state * LCG_MULTIPLIER + LCG_INCREMENT) & MASK_32
            return state

    return next_uint32
