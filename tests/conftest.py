"""Общие фикстуры для тестов."""
import copy
import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

import config
from analyzer import analyze_relation
from helpers import make_relation


@pytest.fixture
def movies_relation():
    return make_relation(
        "R",
        ["TITLE", "YEAR", "STUDIONAME", "PRESIDENT", "PRESADDR"],
        ["TITLE,YEAR->STUDIONAME", "STUDIONAME->PRESIDENT", "PRESIDENT->PRESADDR"],
    )


@pytest.fixture
def stars_relation():
    return make_relation(
        "R",
        ["NAME", "STREET", "CITY", "TITLE", "YEAR"],
        mvds=["NAME->->STREET,CITY"],
    )


@pytest.fixture
def abstract_relation():
    return make_relation(
        "R",
        ["A", "B", "C", "D", "E", "F", "G"],
        ["B->D", "D,G->C", "B,D->E", "A,G->B", "A,D,G->B", "A,D,G->C"],
    )


@pytest.fixture
def third_nf_relation():
    """В 3НФ, но не в НФБК: ключи {A,B} и {A,C}, C->B."""
    return make_relation("R", ["A", "B", "C"], ["A,B->C", "C->B"])


@pytest.fixture
def movies(movies_relation):
    return analyze_relation(movies_relation)


@pytest.fixture
def stars(stars_relation):
    return analyze_relation(stars_relation)


@pytest.fixture
def abstract(abstract_relation):
    return analyze_relation(abstract_relation)


@pytest.fixture
def third_nf(third_nf_relation):
    return analyze_relation(third_nf_relation)


@pytest.fixture
def restore_config():
    """Вернуть настройки к исходным значениям после теста."""
    saved_analysis = copy.deepcopy(config.ANALYSIS_PARAMS)
    saved_benchmark = copy.deepcopy(config.BENCHMARK_PARAMS)
    yield
    config.ANALYSIS_PARAMS.clear()
    config.ANALYSIS_PARAMS.update(saved_analysis)
    config.BENCHMARK_PARAMS.clear()
    config.BENCHMARK_PARAMS.update(saved_benchmark)
