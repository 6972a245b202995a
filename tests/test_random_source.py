"""Tests for the seedable uniform source"""

from titan_engine.random_source import RandomSource, resolve_rng, spawn_sources
from tests.conftest import ScriptedRandomSource


class TestRandomSource:

    def test_draws_in_unit_interval(self):
        rng = RandomSource(1)
        draws = [rng.random() for _ in range(1000)]
        assert all(0.0 <= d < 1.0 for d in draws)

    def test_same_seed_same_stream(self):
        a, b = RandomSource(123), RandomSource(123)
        assert [a.random() for _ in range(10)] == [b.random() for _ in range(10)]

    def test_different_seeds_differ(self):
        a, b = RandomSource(1), RandomSource(2)
        assert [a.random() for _ in range(5)] != [b.random() for _ in range(5)]

    def test_uniform_and_centered_ranges(self):
        rng = RandomSource(9)
        for _ in range(200):
            assert 5.0 <= rng.uniform(5.0, 6.0) < 6.0
            assert -0.5 <= rng.centered() < 0.5

    def test_spawn_is_reproducible(self):
        first = [c.random() for c in RandomSource(5).spawn(3)]
        second = [c.random() for c in RandomSource(5).spawn(3)]
        assert first == second
        assert len(set(first)) == 3


class TestHelpers:

    def test_resolve_keeps_injected_source(self):
        rng = ScriptedRandomSource([0.1])
        assert resolve_rng(rng) is rng

    def test_resolve_creates_source(self):
        assert isinstance(resolve_rng(None), RandomSource)

    def test_spawn_sources_without_spawn_method(self):
        rng = ScriptedRandomSource([0.25, 0.5])
        children = spawn_sources(rng, 2)
        assert len(children) == 2
        assert rng.calls == 2
        assert all(isinstance(c, RandomSource) for c in children)
