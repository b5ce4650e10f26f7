"""Тесты командной строки."""
import json

import pytest

from main import EXAMPLES, main


@pytest.mark.parametrize("example", sorted(EXAMPLES))
def test_examples(example, capsys):
    assert main(["--example", example]) == 0
    out = capsys.readouterr().out
    assert "Анализ отношения: R" in out
    assert "Декомпозиция в 3НФ" in out
    assert "Декомпозиция в НФБК" in out


def test_movies_reports_both_strategies(capsys):
    assert main(["--example", "movies"]) == 0
    out = capsys.readouterr().out
    assert "Текущая нормальная форма: 2НФ" in out
    assert "[Источник: исходное отношение]" in out
    assert "Выбрана стратегия: отношения 3НФ" in out


def test_schema_from_arguments(capsys):
    assert main(["--schema", "R(A, B, C)", "--fds", "A->B; B->C"]) == 0
    assert "Текущая нормальная форма: 2НФ" in capsys.readouterr().out


def test_missing_schema(capsys):
    assert main([]) == 1
    assert "--schema" in capsys.readouterr().err


def test_parse_error(capsys):
    assert main(["--schema", "R(A, B"]) == 1
    assert "Ошибка" in capsys.readouterr().err


@pytest.mark.parametrize("args", [
    ["--schema", "R(A, A)"],
    ["--schema", "R(A, B)", "--fds", "A->C"],
])
def test_integrity_failure(args, capsys):
    assert main(args) == 2
    assert "Ошибка" in capsys.readouterr().err


def test_warnings_printed(capsys):
    assert main(["--schema", "R(A, B)", "--fds", "AB; A->B"]) == 0
    assert "Предупреждение" in capsys.readouterr().err


@pytest.mark.usefixtures("restore_config")
def test_benchmark_with_config(tmp_path):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"benchmark": {"attribute_counts": [3], "repeats": 1}}),
                        encoding="utf-8")
    plot = tmp_path / "bench.png"
    assert main(["--config", str(settings), "--benchmark", "--plot", str(plot)]) == 0
    assert plot.exists()


def test_example_without_fds_prints_no_warning(capsys):
    assert main(["--example", "stars"]) == 0
    assert "Предупреждение" not in capsys.readouterr().err
