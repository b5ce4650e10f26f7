"""Тесты загрузки настроек."""
import json
import logging

import pytest

import config
from fd_algorithms import FDAlgorithms
from helpers import attrs


def _write(tmp_path, data):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


@pytest.mark.usefixtures("restore_config")
class TestLoadConfig:
    def test_updates_sections_in_place(self, tmp_path):
        sections = config.load_config(_write(tmp_path, {"benchmark": {"repeats": 7}}))
        assert config.BENCHMARK_PARAMS["repeats"] == 7
        assert config.BENCHMARK_PARAMS["seed"] == 42
        assert sections["benchmark"] is config.BENCHMARK_PARAMS

    def test_unknown_section_is_skipped(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            config.load_config(_write(tmp_path, {"plots": {"dpi": 300}}))
        assert "Неизвестная секция настроек: plots" in caplog.text

    @pytest.mark.parametrize("data", [[1, 2], {"analysis": 5}])
    def test_non_object_rejected(self, tmp_path, data):
        with pytest.raises(ValueError):
            config.load_config(_write(tmp_path, data))

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            config.load_config(str(tmp_path / "missing.json"))


@pytest.mark.usefixtures("restore_config")
class TestAttributeLimit:
    def test_strict_limit_raises(self):
        config.ANALYSIS_PARAMS.update(max_attributes=2, strict_attribute_limit=True)
        with pytest.raises(ValueError):
            FDAlgorithms.compute_all_closures(attrs("A", "B", "C"), [])

    def test_soft_limit_warns(self, caplog):
        config.ANALYSIS_PARAMS.update(max_attributes=2)
        with caplog.at_level(logging.WARNING):
            closures = FDAlgorithms.compute_all_closures(attrs("A", "B", "C"), [])
        assert len(closures) == 7
        assert "перебор 7 подмножеств" in caplog.text
