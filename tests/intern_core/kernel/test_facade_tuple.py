"""
tests/intern_core/kernel/test_facade_tuple.py
Tuplas Internadas: unicidad referencial, inmutabilidad y ciclo de vida.
"""
import gc
import threading
import unittest
import weakref

from intern_core.categories import UNDEFINED
from intern_core.config import InternConfig, ZeroPolicy
from intern_core.ds.symbol import Symbol
from intern_core.ds.tuple import Tuple
from intern_core.errors import ImmutabilityError
from intern_core.kernel import facade
from intern_core.kernel.facade import Interner


class Thing:
    pass


class TestInternTuple(unittest.TestCase):

    def setUp(self):
        self.interner = Interner(InternConfig(seed=20240601))
        self.t = self.interner.tuple_of

    # =========================================================================
    # 1. FORMA
    # =========================================================================

    def test_empty(self):
        empty = self.interner.intern_tuple([])
        self.assertEqual(len(empty), 0)
        self.assertIs(empty, self.t())

    def test_indexable_and_iterable(self):
        tup = self.t(1, 2, 3)
        self.assertEqual((tup[0], tup[1], tup[2]), (1, 2, 3))
        self.assertEqual(tup[-1], 3)
        self.assertEqual(list(tup), [1, 2, 3])
        self.assertEqual(len(tup), 3)
        self.assertIsInstance(tup, Tuple)

    def test_accepts_any_iterable(self):
        self.assertIs(self.interner.intern_tuple(x for x in (1, 2)), self.t(1, 2))
        self.assertIs(self.interner.intern_tuple([1, 2]), self.t(1, 2))

    def test_holds_every_category(self):
        obj = Thing()
        sym = Symbol("s")
        values = ("text", 1.5, 7, 10 ** 30, True, None, UNDEFINED, sym, obj, [1])
        tup = self.interner.intern_tuple(values)
        for expected, got in zip(values, tup):
            self.assertIs(got, expected)

    # =========================================================================
    # 2. UNICIDAD REFERENCIAL
    # =========================================================================

    def test_same_elements_same_object(self):
        a = self.t(1, "two", 3.0)
        b = self.t(1, "two", 3.0)
        self.assertIs(a, b)
        self.assertEqual(self.interner.tuple_cache.size(), 1)

    def test_different_elements_different_objects(self):
        self.assertIsNot(self.t(1, 2), self.t(2, 1))
        self.assertIsNot(self.t(1, 2), self.t(1, 2, 3))
        self.assertIsNot(self.t(1), self.t(1.0))
        self.assertIsNot(self.t(1), self.t(True))
        self.assertIsNot(self.t(None), self.t(UNDEFINED))
        self.assertIsNot(self.t(), self.t(UNDEFINED))

    def test_equality_is_identity(self):
        a = self.t(1, 2)
        self.assertEqual(a, self.t(1, 2))
        self.assertNotEqual(a, self.t(1, 3))
        self.assertNotEqual(a, (1, 2))
        self.assertEqual(hash(a), a.structural_hash)

    def test_references_compared_by_identity(self):
        first, second = Thing(), Thing()
        self.assertIs(self.t(first), self.t(first))
        self.assertIsNot(self.t(first), self.t(second))

    def test_unweakrefable_references(self):
        items = [1, 2]
        self.assertIs(self.t(items), self.t(items))
        self.assertIsNot(self.t(items), self.t([1, 2]))

    def test_registered_symbols(self):
        self.assertIs(self.t(Symbol.for_key("k")), self.t(Symbol.for_key("k")))
        self.assertIsNot(self.t(Symbol("k")), self.t(Symbol("k")))

    def test_nestable(self):
        inner = self.t(1, 2)
        outer = self.t(inner, 3)
        self.assertIs(outer, self.t(self.t(1, 2), 3))
        self.assertIs(outer[0], inner)

    def test_idempotent(self):
        tup = self.t("a", "b")
        self.assertIs(self.interner.intern_tuple(tup), tup)

    def test_interners_are_independent(self):
        other = Interner(InternConfig(seed=20240601))
        self.assertIsNot(other.tuple_of(1, 2), self.t(1, 2))
        # Una tupla ajena se re-interna por contenido
        foreign = other.tuple_of(1, 2)
        self.assertIs(self.interner.intern_tuple(foreign), self.t(1, 2))

    # =========================================================================
    # 3. FLOATS
    # =========================================================================

    def test_nan_is_equal_to_itself(self):
        self.assertIs(self.t(float("nan")), self.t(float("nan")))

    def test_zero_policy_equal(self):
        self.assertIs(self.t(0.0), self.t(-0.0))

    def test_zero_policy_distinct(self):
        interner = Interner(InternConfig(seed=1, zero_policy=ZeroPolicy.DISTINCT))
        self.assertIsNot(interner.tuple_of(0.0), interner.tuple_of(-0.0))
        self.assertIs(interner.tuple_of(-0.0), interner.tuple_of(-0.0))

    # =========================================================================
    # 4. INMUTABILIDAD
    # =========================================================================

    def test_frozen(self):
        tup = self.t(1, 2)
        with self.assertRaises(ImmutabilityError):
            tup[0] = 5
        with self.assertRaises(ImmutabilityError):
            del tup[0]
        with self.assertRaises(TypeError):
            tup.extra = 1
        with self.assertRaises(TypeError):
            del tup._items
        self.assertEqual(list(tup), [1, 2])

    # =========================================================================
    # 5. CICLO DE VIDA
    # =========================================================================

    def test_reclaimed_when_unreferenced(self):
        removed = []
        deregister = self.interner.register_cleanup_listener(
            lambda cache, h, entry: removed.append(h)
        )
        tup = self.t("ephemeral")
        expected_hash = tup.structural_hash
        probe = weakref.ref(tup)
        del tup
        gc.collect()
        self.assertIsNone(probe())
        self.assertEqual(removed, [expected_hash])
        self.assertEqual(self.interner.tuple_cache.size(), 0)
        deregister()

    def test_elements_kept_alive_by_tuple(self):
        obj = Thing()
        probe = weakref.ref(obj)
        tup = self.t(obj)
        del obj
        gc.collect()
        self.assertIs(tup[0], probe())

    # =========================================================================
    # 6. CONCURRENCIA
    # =========================================================================

    def test_concurrent_interning(self):
        n_threads = 12
        barrier = threading.Barrier(n_threads)
        results = [None] * n_threads

        def worker(idx):
            barrier.wait()
            results[idx] = self.t("shared", 42, 2.5)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(n_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for r in results:
            self.assertIs(r, results[0])


class TestModuleApi(unittest.TestCase):

    def test_default_interner_functions(self):
        a = facade.intern_tuple(["module", 1])
        self.assertIs(a, facade.tuple_of("module", 1))
        self.assertIn(a, facade.tuple_cache())
        self.assertIs(facade.default_interner().tuple_cache, facade.tuple_cache())

    def test_module_cleanup_listener(self):
        removed = []
        deregister = facade.register_cleanup_listener(lambda cache, h, entry: removed.append(cache))
        facade.tuple_of("module-ephemeral")
        gc.collect()
        self.assertTrue(deregister())
        self.assertIn(facade.tuple_cache(), removed)


if __name__ == '__main__':
    unittest.main()
