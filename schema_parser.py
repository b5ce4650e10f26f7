"""
Разбор текстового описания схемы и зависимостей
"""
import logging
import re
from typing import List, Optional, Tuple

from models import FD_ARROW, MVD_ARROW, Relation

logger = logging.getLogger(__name__)

DependencySpec = Tuple[List[str], List[str]]

_SCHEMA_CHARS = re.compile(r"^[A-Z0-9_,() ]*$")
_DEPENDENCY_CHARS = re.compile(r"^[A-Z0-9_,;\->\s]*$")


class SchemaParseError(ValueError):
    """Ошибка разбора текстового описания схемы"""


def parse_schema(text: str) -> Relation:
    """
    Разобрать схему вида R(A, B, C)

    Returns:
        Отношение; повтор атрибута отражается флагом passed_integrity_checks
    """
    schema = (text or "").strip().upper()
    if not schema:
        raise SchemaParseError("Схема отношения пуста")
    if not _SCHEMA_CHARS.match(schema):
        raise SchemaParseError("Схема может содержать только буквы, цифры, '_', запятые и скобки")
    if schema.count("(") != 1 or schema.count(")") != 1 or schema.index("(") > schema.index(")"):
        raise SchemaParseError("Схема должна содержать ровно одну пару скобок: R( )")

    name = schema[:schema.index("(")].strip()
    if not name:
        raise SchemaParseError("Не задано имя отношения")

    body = schema[schema.index("(") + 1:schema.index(")")]
    relation = Relation.from_attribute_names(name, body.split(","))
    if not relation.attributes:
        raise SchemaParseError(f"Отношение {name} не содержит атрибутов")
    return relation


def parse_dependencies(text: str, multivalued: bool = False) -> Tuple[List[DependencySpec], List[str]]:
    """
    Разобрать зависимости вида "A,B -> C; D -> E"

    Для многозначных зависимостей допускаются обе стрелки: "->->" и "->".
    Элемент без стрелки или с пустой частью превращается в пустую пару,
    которую загрузка в отношение пропускает.

    Returns:
        (пары_имен, предупреждения)
    """
    source = (text or "").upper()
    if not _DEPENDENCY_CHARS.match(source):
        raise SchemaParseError("Зависимости могут содержать только буквы, цифры, '_', запятые, "
                               "точки с запятой и стрелки")

    compact = re.sub(r"\s", "", source)
    specs: List[DependencySpec] = []
    warnings: List[str] = []
    if not compact:
        return specs, warnings

    kind = "многозначная" if multivalued else "функциональная"
    for item in compact.split(";"):
        if not item:
            continue
        sides = _split_sides(item, multivalued)
        if sides is None:
            warnings.append(f"Некорректная {kind} зависимость пропущена: {item}")
            specs.append(([], []))
            continue
        left, right = sides
        specs.append((left, right))

    logger.debug("Разобрано зависимостей: %d, предупреждений: %d", len(specs), len(warnings))
    return specs, warnings


def _split_sides(item: str, multivalued: bool) -> Optional[DependencySpec]:
    arrow = MVD_ARROW if multivalued and MVD_ARROW in item else FD_ARROW
    if arrow not in item:
        return None
    left_text, right_text = item.split(arrow, 1)
    left = [name for name in left_text.split(",") if name]
    right = [name for name in right_text.split(",") if name]
    if not left or not right or any(ch in "->" for ch in right_text):
        return None
    return left, right


def build_relation(schema: str, fds: str = "", mvds: str = "") -> Tuple[Relation, List[str]]:
    """
    Разобрать схему и зависимости и загрузить их в отношение

    Returns:
        (отношение, предупреждения)
    """
    relation = parse_schema(schema)
    warnings: List[str] = []

    fd_specs, fd_warnings = parse_dependencies(fds)
    mvd_specs, mvd_warnings = parse_dependencies(mvds, multivalued=True)
    warnings.extend(fd_warnings)
    warnings.extend(mvd_warnings)

    if not relation.passed_integrity_checks:
        return relation, warnings

    stored = relation.add_functional_dependencies(fd_specs)
    if not relation.passed_integrity_checks:
        return relation, warnings
    # Все заданные ФЗ отброшены как некорректные
    if fd_specs and stored == 0:
        warnings.append("Не задано ни одной корректной функциональной зависимости")
    relation.add_multivalued_dependencies(mvd_specs)
    return relation, warnings
