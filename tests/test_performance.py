"""Тесты бенчмарка производительности."""
import random

from analyzer import analyze_relation
from performance_test import (
    STAGES, generate_random_relation, plot_performance_histogram, run_performance_test
)


def test_generate_random_relation():
    relation = generate_random_relation(5, 5, random.Random(1))
    assert relation.name == "R5"
    assert [a.name for a in relation.attributes] == ["A1", "A2", "A3", "A4", "A5"]
    assert relation.passed_integrity_checks
    assert 0 < len(relation.functional_dependencies) <= 5
    assert analyze_relation(relation).normal_forms.is_1nf


def test_generation_is_reproducible():
    first = generate_random_relation(6, 6, random.Random(7))
    second = generate_random_relation(6, 6, random.Random(7))
    assert [fd.name for fd in first.functional_dependencies] == \
        [fd.name for fd in second.functional_dependencies]


def test_run_performance_test():
    results = run_performance_test([3, 4], repeats=2, seed=1, verbose=False)
    assert sorted(results) == [3, 4]
    for timings in results.values():
        assert set(timings) == set(STAGES)
        for stage in STAGES:
            assert timings[stage]["mean"] >= 0
            assert timings[stage]["std"] >= 0


def test_plot_saved_to_file(tmp_path):
    results = run_performance_test([3], repeats=1, verbose=False)
    path = tmp_path / "benchmark.png"
    assert plot_performance_histogram(results, save_path=str(path)) is not None
    assert path.exists()


def test_plot_without_data(capsys):
    assert plot_performance_histogram({}) is None
    assert "Нет данных" in capsys.readouterr().out
