"""
Настройки анализа, бенчмарка и журналирования
"""
import json
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

# ======================= Параметры анализа =======================
ANALYSIS_PARAMS: Dict[str, Any] = {
    'max_attributes': 20,            # выше - перебор 2^n подмножеств становится слишком долгим
    'strict_attribute_limit': False,  # True - отказ вместо предупреждения
}

# ======================= Параметры бенчмарка =======================
BENCHMARK_PARAMS: Dict[str, Any] = {
    'attribute_counts': [3, 4, 5, 6, 7, 8, 9, 10],
    'fd_ratio': 1.0,   # количество ФЗ на один атрибут
    'repeats': 3,
    'seed': 42,
}

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_SECTIONS = {
    'analysis': ANALYSIS_PARAMS,
    'benchmark': BENCHMARK_PARAMS,
}


def load_config(path: str) -> Dict[str, Dict[str, Any]]:
    """
    Загрузить JSON-файл настроек поверх значений по умолчанию.

    Формат: {"analysis": {...}, "benchmark": {...}}. Неизвестные секции
    пропускаются. Словари настроек обновляются на месте, поэтому модули,
    импортировавшие их, видят новые значения.
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Файл настроек {path} должен содержать JSON-объект")

    for section, values in data.items():
        target = _SECTIONS.get(section)
        if target is None:
            logger.warning("Неизвестная секция настроек: %s", section)
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Секция {section} должна быть JSON-объектом")
        target.update(values)

    return dict(_SECTIONS)
