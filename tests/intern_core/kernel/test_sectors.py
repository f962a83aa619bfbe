"""
tests/intern_core/kernel/test_sectors.py
Topología de Caches: un sector por espacio de internado.
"""
import gc
import unittest

from intern_core.kernel.cache import InternCache
from intern_core.kernel.sectors import (
    PROJECTED_STRIPES, RECORD_SECTOR, TUPLE_SECTOR, SectorManager, projected_sector,
)


class Token:
    def __init__(self, key):
        self.key = key


def token_hash(token):
    return hash(token.key) & 0xFFFFFFFF


def token_equivalent(a, b):
    return a.key == b.key


class TestProjectedSector(unittest.TestCase):

    def test_normalizes_key_order_and_duplicates(self):
        self.assertEqual(projected_sector(["b", "a", "b"]), (RECORD_SECTOR, ("a", "b")))
        self.assertEqual(projected_sector(("a", "b")), projected_sector(("b", "a")))

    def test_distinct_from_plain_record_sector(self):
        self.assertNotEqual(projected_sector([]), RECORD_SECTOR)


class TestSectorManager(unittest.TestCase):

    def setUp(self):
        self.manager = SectorManager(stripes=32)

    def test_cache_is_memoized_per_sector(self):
        first = self.manager.get_cache(TUPLE_SECTOR, token_hash, token_equivalent)
        again = self.manager.get_cache(TUPLE_SECTOR, token_hash, token_equivalent)
        other = self.manager.get_cache(RECORD_SECTOR, token_hash, token_equivalent)
        self.assertIsInstance(first, InternCache)
        self.assertIs(first, again)
        self.assertIsNot(first, other)
        self.assertIs(self.manager.find(TUPLE_SECTOR), first)
        self.assertIsNone(self.manager.find("missing"))

    def test_sector_name(self):
        cache = self.manager.get_cache(TUPLE_SECTOR, token_hash, token_equivalent)
        self.assertEqual(cache.name, "Sector-tuple")

    def test_projected_sectors_use_fewer_stripes(self):
        cache = self.manager.get_cache(projected_sector(["x"]), token_hash, token_equivalent)
        self.assertEqual(len(cache._stripes), PROJECTED_STRIPES)
        plain = self.manager.get_cache(TUPLE_SECTOR, token_hash, token_equivalent)
        self.assertEqual(len(plain._stripes), 32)

    def test_sectors_are_isolated(self):
        tuples = self.manager.get_cache(TUPLE_SECTOR, token_hash, token_equivalent)
        records = self.manager.get_cache(RECORD_SECTOR, token_hash, token_equivalent)
        a = tuples.get_or_insert(Token("k"))
        b = records.get_or_insert(Token("k"))
        self.assertIsNot(a, b)

    def test_listeners_are_shared(self):
        events = []
        deregister = self.manager.register_cleanup_listener(
            lambda cache, h, entry: events.append(cache.name)
        )
        tuples = self.manager.get_cache(TUPLE_SECTOR, token_hash, token_equivalent)
        records = self.manager.get_cache(RECORD_SECTOR, token_hash, token_equivalent)
        tuples.get_or_insert(Token("t"))
        records.get_or_insert(Token("r"))
        gc.collect()
        self.assertEqual(sorted(events), ["Sector-record", "Sector-tuple"])
        self.assertTrue(deregister())

    def test_projected_sector_dropped_when_idle(self):
        sector = projected_sector(["x"])
        cache = self.manager.acquire(sector, token_hash, token_equivalent)
        token = cache.get_or_insert(Token("t"))

        self.manager.release(sector)
        self.assertIs(self.manager.find(sector), cache, "Un registro vivo retiene el sector")

        del token
        gc.collect()
        self.assertIsNone(self.manager.find(sector))

    def test_projected_sector_kept_while_held(self):
        sector = projected_sector(["x"])
        first = self.manager.acquire(sector, token_hash, token_equivalent)
        second = self.manager.acquire(sector, token_hash, token_equivalent)
        self.assertIs(first, second)

        first.get_or_insert(Token("t"))
        gc.collect()
        self.assertIs(self.manager.find(sector), first, "Fábricas vivas retienen el sector vacío")

        self.manager.release(sector)
        self.assertIs(self.manager.find(sector), first)
        self.manager.release(sector)
        self.assertIsNone(self.manager.find(sector))

    def test_core_sectors_are_never_dropped(self):
        cache = self.manager.get_cache(TUPLE_SECTOR, token_hash, token_equivalent)
        cache.get_or_insert(Token("t"))
        gc.collect()
        self.assertIs(self.manager.find(TUPLE_SECTOR), cache)

    def test_stats_and_reset(self):
        cache = self.manager.get_cache(TUPLE_SECTOR, token_hash, token_equivalent)
        keep = cache.get_or_insert(Token("alive"))
        stats = self.manager.stats()
        self.assertEqual(stats[TUPLE_SECTOR]["entries"], 1)

        self.manager.reset()
        self.assertEqual(cache.size(), 0)
        fresh = cache.get_or_insert(Token("alive"))
        self.assertIsNot(fresh, keep, "reset no olvidó el canónico anterior")


if __name__ == '__main__':
    unittest.main()
