"""
Измерение времени анализа и декомпозиции в зависимости от числа атрибутов
"""
import random
import time
from typing import Dict, List, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt

from analyzer import analyze_relation
from config import BENCHMARK_PARAMS
from decomposition import Decomposer
from models import Relation

STAGES = ("analysis", "3nf", "bcnf")

STAGE_DESCRIPTIONS = {
    'analysis': 'Анализ (замыкания, ключи, покрытие, НФ)',
    '3nf': 'Декомпозиция в 3НФ',
    'bcnf': 'Декомпозиция в НФБК (обе стратегии)',
}


def generate_random_relation(num_attributes: int, num_fds: int, rng: random.Random) -> Relation:
    """
    Сгенерировать отношение со случайными ФЗ

    Левая часть - от 1 до 2 атрибутов, правая - 1 атрибут не из левой части.
    """
    names = [f"A{i}" for i in range(1, num_attributes + 1)]
    relation = Relation.from_attribute_names(f"R{num_attributes}", names)

    specs = []
    seen = set()
    attempts = 0
    while len(specs) < num_fds and attempts < num_fds * 20:
        attempts += 1
        left = rng.sample(names, min(len(names) - 1, rng.randint(1, 2)))
        candidates = [n for n in names if n not in left]
        if not candidates:
            break
        right = [rng.choice(candidates)]
        key = (tuple(sorted(left)), right[0])
        if key in seen:
            continue
        seen.add(key)
        specs.append((left, right))

    relation.add_functional_dependencies(specs)
    return relation


def _time_call(func, repeats: int) -> np.ndarray:
    timings = []
    for _ in range(repeats):
        start = time.perf_counter()
        func()
        timings.append((time.perf_counter() - start) * 1000)
    return np.array(timings)


def run_performance_test(attribute_counts: Optional[Sequence[int]] = None,
                         repeats: Optional[int] = None,
                         fd_ratio: Optional[float] = None,
                         seed: Optional[int] = None,
                         verbose: bool = True) -> Dict[int, Dict[str, Dict[str, float]]]:
    """
    Тестирование производительности анализа и декомпозиции

    Returns:
        {число_атрибутов: {стадия: {'mean': мс, 'std': мс}}}
    """
    attribute_counts = list(attribute_counts or BENCHMARK_PARAMS['attribute_counts'])
    repeats = repeats or BENCHMARK_PARAMS['repeats']
    fd_ratio = BENCHMARK_PARAMS['fd_ratio'] if fd_ratio is None else fd_ratio
    seed = BENCHMARK_PARAMS['seed'] if seed is None else seed

    rng = random.Random(seed)
    results: Dict[int, Dict[str, Dict[str, float]]] = {}

    if verbose:
        print(f"\n{'=' * 60}")
        print("ТЕСТ ПРОИЗВОДИТЕЛЬНОСТИ")
        print(f"{'=' * 60}")
        print(f"Количество атрибутов: {attribute_counts}")
        print(f"Повторений на замер: {repeats}")
        print(f"{'=' * 60}\n")

    for n in attribute_counts:
        relation = generate_random_relation(n, max(1, int(round(n * fd_ratio))), rng)
        analyzed = analyze_relation(relation)

        timings = {
            'analysis': _time_call(lambda: analyze_relation(relation), repeats),
            '3nf': _time_call(lambda: Decomposer.decompose_to_3nf(analyzed), repeats),
            'bcnf': _time_call(lambda: Decomposer.choose_bcnf_decomposition(analyzed), repeats),
        }
        results[n] = {
            stage: {'mean': float(np.mean(values)), 'std': float(np.std(values))}
            for stage, values in timings.items()
        }

        if verbose:
            line = ", ".join(f"{stage}: {results[n][stage]['mean']:.2f} мс" for stage in STAGES)
            print(f"  N = {n:2d} ({len(relation.functional_dependencies)} ФЗ) → {line}")

    return results


def plot_performance_histogram(results: Dict[int, Dict[str, Dict[str, float]]],
                               save_path: Optional[str] = None):
    """
    Построение графика времени выполнения от числа атрибутов

    Args:
        results: Результат run_performance_test
        save_path: Файл для сохранения; если не задан - окно matplotlib
    """
    if not results:
        print("Нет данных для построения графиков")
        return None

    n_values = np.array(sorted(results.keys()))
    colors = ['#FF6B6B', '#4ECDC4', '#45B7D1']
    markers = ['o', 's', '^']

    fig, ax = plt.subplots(figsize=(12, 7))
    for idx, stage in enumerate(STAGES):
        means = np.array([results[n][stage]['mean'] for n in n_values])
        stds = np.array([results[n][stage]['std'] for n in n_values])
        ax.errorbar(n_values, means, yerr=stds, marker=markers[idx], linestyle='-',
                    color=colors[idx], capsize=4, label=STAGE_DESCRIPTIONS[stage])

    ax.set_title('Зависимость времени выполнения от количества атрибутов (N)', fontsize=16)
    ax.set_xlabel('Количество атрибутов (N)', fontsize=12)
    ax.set_ylabel('Время выполнения (мс)', fontsize=12)
    ax.set_xticks(n_values)
    ax.set_yscale('log')
    ax.legend()
    ax.grid(True, which="both", ls="--", linewidth=0.5)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path)
        plt.close(fig)
    else:
        plt.show()
    return fig


if __name__ == "__main__":
    plot_performance_histogram(run_performance_test())
