"""
Командная строка: анализ отношения и декомпозиция в 3НФ и НФБК
"""
import argparse
import logging
import sys
from typing import List, Optional

from analyzer import NormalFormAnalyzer, analyze_relation
from config import LOG_FORMAT, load_config
from decomposition import Decomposer
from schema_parser import SchemaParseError, build_relation

logger = logging.getLogger(__name__)

EXAMPLES = {
    'movies': (
        "R(TITLE, YEAR, STUDIONAME, PRESIDENT, PRESADDR)",
        "TITLE, YEAR -> STUDIONAME; STUDIONAME -> PRESIDENT; PRESIDENT -> PRESADDR",
        "",
    ),
    'stars': (
        "R(NAME, STREET, CITY, TITLE, YEAR)",
        "",
        "NAME ->-> STREET, CITY",
    ),
    'abstract': (
        "R(A, B, C, D, E, F, G)",
        "B->D; D,G->C; B,D->E; A,G->B; A,D,G->B; A,D,G->C",
        "",
    ),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Анализ нормальных форм отношения и декомпозиция в 3НФ и НФБК")
    parser.add_argument('--schema', type=str, help='Схема отношения, например "R(A,B,C)"')
    parser.add_argument('--fds', type=str, default='', help='ФЗ, например "A->B; B,C->A"')
    parser.add_argument('--mvds', type=str, default='', help='МЗД, например "A->->B"')
    parser.add_argument('--example', choices=sorted(EXAMPLES), help='Встроенный пример')
    parser.add_argument('--config', type=str, help='JSON-файл с настройками')
    parser.add_argument('--benchmark', action='store_true', help='Запустить тест производительности')
    parser.add_argument('--plot', type=str, help='Сохранить график бенчмарка в файл')
    parser.add_argument('--verbose', '-v', action='store_true', help='Подробный журнал')
    return parser


def render_decompositions(analyzed) -> str:
    """Текст с результатами декомпозиции в 3НФ и обеих стратегий НФБК"""
    output = "\n" + "-" * 50 + "\n"
    output += "Декомпозиция в 3НФ (без потерь, с сохранением ФЗ минимального покрытия):\n"
    output += Decomposer.decompose_to_3nf(analyzed).get_summary()

    output += "\n" + "-" * 50 + "\n"
    output += "Декомпозиция в НФБК (без потерь, но не обязательно с сохранением ФЗ):\n"
    comparison = Decomposer.choose_bcnf_decomposition(analyzed)
    if not comparison.chosen.decomposition_needed:
        output += comparison.chosen.get_summary()
        return output

    output += "\n[Источник: исходное отношение]\n"
    output += comparison.from_relation.get_summary()
    output += "\n[Источник: отношения 3НФ]\n"
    output += comparison.from_3nf.get_summary()
    label = "исходное отношение" if comparison.chosen is comparison.from_relation else "отношения 3НФ"
    output += f"\nВыбрана стратегия: {label}\n"
    return output


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format=LOG_FORMAT)

    try:
        if args.config:
            load_config(args.config)

        if args.benchmark:
            from performance_test import plot_performance_histogram, run_performance_test
            results = run_performance_test()
            if args.plot:
                plot_performance_histogram(results, save_path=args.plot)
            return 0

        if args.example:
            schema, fds, mvds = EXAMPLES[args.example]
        elif args.schema:
            schema, fds, mvds = args.schema, args.fds, args.mvds
        else:
            print("Ошибка: задайте --schema или --example", file=sys.stderr)
            return 1

        relation, warnings = build_relation(schema, fds, mvds)
        for warning in warnings:
            print(f"Предупреждение: {warning}", file=sys.stderr)
        if not relation.passed_integrity_checks:
            print(f"Ошибка: {relation.integrity_error}", file=sys.stderr)
            return 2

        analyzed = analyze_relation(relation)
        print(NormalFormAnalyzer(analyzed).get_analysis_report())
        print(render_decompositions(analyzed))
    except (SchemaParseError, ValueError, OSError) as e:
        logger.debug("Ошибка выполнения", exc_info=True)
        print(f"Ошибка: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
