"""Вспомогательные функции для построения тестовых отношений."""
from models import Attribute, Relation


def attrs(*names):
    """Кортеж атрибутов по именам."""
    return tuple(Attribute(name) for name in names)


def names(items):
    """Имена атрибутов или зависимостей."""
    return [item.name for item in items]


def name_sets(relations):
    """Составы отношений в виде множеств имен атрибутов."""
    return [set(names(rel.attributes)) for rel in relations]


def make_relation(schema_name, attribute_names, fds=(), mvds=()):
    """Отношение с зависимостями в виде строк "A,B->C"."""
    relation = Relation.from_attribute_names(schema_name, attribute_names)
    relation.add_functional_dependencies([_spec(fd, "->") for fd in fds])
    relation.add_multivalued_dependencies([_spec(mvd, "->->") for mvd in mvds])
    return relation


def _spec(text, arrow):
    left, right = text.split(arrow)
    return left.split(","), right.split(",")
