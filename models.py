"""
Модуль с классами для представления данных реляционной модели
"""
import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import total_ordering

logger = logging.getLogger(__name__)

FD_ARROW = "->"
MVD_ARROW = "->->"


class NormalForm(Enum):
    """Перечисление нормальных форм"""
    UNNORMALIZED = "Ненормализованная"
    FIRST_NF = "1НФ"
    SECOND_NF = "2НФ"
    THIRD_NF = "3НФ"
    BCNF = "НФБК"
    FOURTH_NF = "4НФ"

    @property
    def rank(self) -> int:
        """Порядковый номер формы (для сравнения уровней)"""
        return list(NormalForm).index(self)


@total_ordering
@dataclass(frozen=True)
class Attribute:
    """
    Атрибут отношения.

    Порядок атрибутов: сначала по длине имени, затем лексикографически.
    Этот порядок используется везде, где атрибуты сортируются,
    в том числе в канонических именах зависимостей.
    """
    name: str

    def sort_key(self) -> Tuple[int, str]:
        return len(self.name), self.name

    def __hash__(self):
        return hash(self.name)

    def __eq__(self, other):
        if isinstance(other, Attribute):
            return self.name == other.name
        return False

    def __lt__(self, other):
        if not isinstance(other, Attribute):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __repr__(self):
        return f"{self.name}"


def sort_attributes(attributes: Iterable[Attribute]) -> Tuple[Attribute, ...]:
    """Убрать дубликаты (по имени) и отсортировать атрибуты"""
    return tuple(sorted(set(attributes)))


def attribute_names(attributes: Iterable[Attribute]) -> str:
    """Имена атрибутов через запятую (для отчетов)"""
    return ", ".join(a.name for a in attributes)


def is_subset(smaller: Iterable[Attribute], larger: Iterable[Attribute]) -> bool:
    """Все атрибуты первого набора входят во второй"""
    return set(smaller) <= set(larger)


def is_proper_subset(smaller: Iterable[Attribute], larger: Iterable[Attribute]) -> bool:
    """Первый набор - собственное подмножество второго"""
    return set(smaller) < set(larger)


@dataclass(frozen=True, eq=False)
class Dependency:
    """
    Базовый класс зависимости: пара (левая часть, правая часть).

    Обе части хранятся без дубликатов и отсортированными. Каноническое имя
    строится как "A,B->C" (стрелка зависит от вида зависимости). Равенство и
    хэш определяются только каноническим именем.
    """
    determinant: Tuple[Attribute, ...]
    dependent: Tuple[Attribute, ...]

    ARROW = FD_ARROW

    def __post_init__(self):
        object.__setattr__(self, "determinant", sort_attributes(self.determinant))
        object.__setattr__(self, "dependent", sort_attributes(self.dependent))

    @property
    def name(self) -> str:
        left = ",".join(a.name for a in self.determinant)
        right = ",".join(a.name for a in self.dependent)
        return f"{left}{self.ARROW}{right}"

    @property
    def left_set(self) -> FrozenSet[Attribute]:
        return frozenset(self.determinant)

    @property
    def right_set(self) -> FrozenSet[Attribute]:
        return frozenset(self.dependent)

    @property
    def attribute_set(self) -> FrozenSet[Attribute]:
        """Все атрибуты зависимости (обе части)"""
        return self.left_set | self.right_set

    def is_proper(self) -> bool:
        """Обе части непусты"""
        return bool(self.determinant) and bool(self.dependent)

    def is_trivial(self) -> bool:
        """Правая часть содержится в левой"""
        return self.right_set <= self.left_set

    def sort_key(self) -> Tuple[int, str]:
        return len(self.determinant), self.name

    def __eq__(self, other):
        if isinstance(other, Dependency):
            return self.name == other.name
        return False

    def __hash__(self):
        return hash(self.name)

    def __lt__(self, other):
        if not isinstance(other, Dependency):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __repr__(self):
        return self.name


@dataclass(frozen=True, eq=False)
class FunctionalDependency(Dependency):
    """Класс для представления функциональной зависимости"""

    ARROW = FD_ARROW

    def split(self) -> List["FunctionalDependency"]:
        """Разбить на ФЗ с одним атрибутом в правой части"""
        return [FunctionalDependency(self.determinant, (attr,)) for attr in self.dependent]

    def to_multivalued(self) -> "MultivaluedDependency":
        """Каждая ФЗ A -> B является и МЗД A ->-> B"""
        return MultivaluedDependency(self.determinant, self.dependent)


@dataclass(frozen=True, eq=False)
class MultivaluedDependency(Dependency):
    """Класс для представления многозначной зависимости (для 4НФ)"""

    ARROW = MVD_ARROW


def unique_dependencies(dependencies: Iterable[Dependency]) -> List[Dependency]:
    """Убрать дубликаты по каноническому имени, сохранив порядок"""
    seen = set()
    result = []
    for dependency in dependencies:
        if dependency.name not in seen:
            seen.add(dependency.name)
            result.append(dependency)
    return result


@dataclass(frozen=True)
class Closure:
    """Замыкание: пара (S, S+), где S+ содержит S"""
    determinant: Tuple[Attribute, ...]
    closure: Tuple[Attribute, ...]

    def __post_init__(self):
        object.__setattr__(self, "determinant", sort_attributes(self.determinant))
        object.__setattr__(self, "closure", sort_attributes(self.closure))

    @property
    def left_set(self) -> FrozenSet[Attribute]:
        return frozenset(self.determinant)

    @property
    def right_set(self) -> FrozenSet[Attribute]:
        return frozenset(self.closure)

    def sort_key(self):
        return len(self.determinant), tuple(a.sort_key() for a in self.determinant)

    def __repr__(self):
        return f"{{{attribute_names(self.determinant)}}}+ = {{{attribute_names(self.closure)}}}"


@dataclass
class Relation:
    """
    Класс для представления отношения (исходная, "сырая" стадия).

    Единственный изменяемый объект модели: меняется только при загрузке
    зависимостей. Анализ выполняется функцией analyzer.analyze_relation,
    которая возвращает неизменяемый снимок AnalyzedRelation.
    """
    name: str
    attributes: List[Attribute] = field(default_factory=list)
    functional_dependencies: List[FunctionalDependency] = field(default_factory=list)
    multivalued_dependencies: List[MultivaluedDependency] = field(default_factory=list)
    passed_integrity_checks: bool = True
    integrity_error: str = ""

    @classmethod
    def from_attribute_names(cls, name: str, names: Iterable[str]) -> "Relation":
        """
        Создать отношение по списку имен атрибутов.

        Повторное имя не приводит к исключению: флаг passed_integrity_checks
        сбрасывается, сообщение сохраняется в integrity_error.
        """
        relation = cls(name)
        for raw_name in names:
            attr_name = raw_name.strip()
            if not attr_name:
                continue
            attr = Attribute(attr_name)
            if attr in relation.attributes:
                relation._fail(f"Duplicate attribute encountered: {attr_name}")
                break
            relation.attributes.append(attr)
        return relation

    def get_attribute_by_name(self, name: str) -> Optional[Attribute]:
        """Получить атрибут по имени"""
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    def get_all_attributes_set(self) -> FrozenSet[Attribute]:
        """Получить все атрибуты как множество"""
        return frozenset(self.attributes)

    def add_functional_dependencies(self, specs: Iterable[Tuple[Sequence[str], Sequence[str]]]) -> int:
        """
        Загрузить пакет функциональных зависимостей.

        Args:
            specs: пары (имена левой части, имена правой части)

        Returns:
            Количество сохраненных зависимостей (0, если пакет отклонен)
        """
        return self._ingest(specs, FunctionalDependency, "functional", self.functional_dependencies)

    def add_multivalued_dependencies(self, specs: Iterable[Tuple[Sequence[str], Sequence[str]]]) -> int:
        """Загрузить пакет многозначных зависимостей (правила те же, что и для ФЗ)"""
        return self._ingest(specs, MultivaluedDependency, "multivalued", self.multivalued_dependencies)

    def _ingest(self, specs, dependency_cls, kind: str, store: List[Dependency]) -> int:
        # Пакет либо принимается целиком, либо отклоняется на первой ошибке
        staged: List[Dependency] = []
        for left_names, right_names in specs:
            left = self._resolve_attributes(left_names)
            right = self._resolve_attributes(right_names)
            if left is None or right is None:
                return 0

            dependency = dependency_cls(left, right)
            if not dependency.is_proper():
                logger.debug("Пропущена некорректная зависимость: %s -> %s", left_names, right_names)
                continue

            if dependency in store or dependency in staged:
                self._fail(f"Duplicate {kind} dependency encountered: {dependency.name}")
                return 0
            staged.append(dependency)

        store.extend(staged)
        store.sort(key=lambda d: d.sort_key())
        return len(staged)

    def _resolve_attributes(self, names: Iterable[str]) -> Optional[List[Attribute]]:
        result = []
        for raw_name in names:
            attr_name = raw_name.strip()
            if not attr_name:
                continue
            attr = self.get_attribute_by_name(attr_name)
            if attr is None:
                self._fail(f"Attribute {attr_name} does not exist in schema of Relation {self.name}")
                return None
            result.append(attr)
        return result

    def _fail(self, message: str):
        logger.warning("Ошибка целостности схемы %s: %s", self.name, message)
        self.passed_integrity_checks = False
        self.integrity_error = message

    def describe(self) -> str:
        """Отношение вместе с его ФЗ в одну строку"""
        fds = "; ".join(fd.name for fd in self.functional_dependencies) or "(нет)"
        return f"{self!r} с ФЗ: {fds}."

    def __repr__(self):
        attrs_str = ", ".join([attr.name for attr in self.attributes])
        return f"{self.name}({attrs_str})"


@dataclass(frozen=True)
class PartialDependency:
    """Частичная зависимость непростого атрибута от части составного ключа"""
    attribute: Attribute
    subset: Closure
    key: Closure

    def __repr__(self):
        return (f"{{{attribute_names(self.subset.determinant)}}} -> {self.attribute.name} "
                f"(ключ {{{attribute_names(self.key.determinant)}}})")


@dataclass(frozen=True)
class NormalFormResult:
    """Результат проверки нормальных форм (1НФ - 4НФ)"""
    is_1nf: bool
    is_2nf: bool
    is_3nf: bool
    is_bcnf: bool
    is_4nf: bool
    partial_dependencies: Tuple[PartialDependency, ...] = ()
    third_nf_violations: Tuple[FunctionalDependency, ...] = ()
    bcnf_violations: Tuple[FunctionalDependency, ...] = ()
    fourth_nf_violations: Tuple[MultivaluedDependency, ...] = ()
    messages: Dict[NormalForm, str] = field(default_factory=dict, compare=False)

    @property
    def highest_form(self) -> NormalForm:
        """Наивысшая нормальная форма, которой удовлетворяет отношение"""
        if not self.is_1nf:
            return NormalForm.UNNORMALIZED
        if not self.is_2nf:
            return NormalForm.FIRST_NF
        if not self.is_3nf:
            return NormalForm.SECOND_NF
        if not self.is_bcnf:
            return NormalForm.THIRD_NF
        if not self.is_4nf:
            return NormalForm.BCNF
        return NormalForm.FOURTH_NF


@dataclass(frozen=True)
class AnalyzedRelation:
    """
    Неизменяемый снимок отношения после анализа.

    Содержит копии атрибутов и зависимостей исходного отношения и все
    вычисленные списки: замыкания, ключи, минимальное покрытие, выведенные
    ФЗ и результат проверки нормальных форм.
    """
    name: str
    attributes: Tuple[Attribute, ...]
    functional_dependencies: Tuple[FunctionalDependency, ...]
    multivalued_dependencies: Tuple[MultivaluedDependency, ...]
    closures: Tuple[Closure, ...] = ()
    minimum_keys: Tuple[Closure, ...] = ()
    superkeys: Tuple[Closure, ...] = ()
    prime_attributes: Tuple[Attribute, ...] = ()
    non_prime_attributes: Tuple[Attribute, ...] = ()
    minimal_cover: Tuple[FunctionalDependency, ...] = ()
    cover_lost_dependencies: Tuple[FunctionalDependency, ...] = ()
    derived_dependencies: Tuple[FunctionalDependency, ...] = ()
    normal_forms: Optional[NormalFormResult] = None
    _closure_index: Dict[FrozenSet[Attribute], Closure] = field(
        default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_closure_index", {c.left_set: c for c in self.closures})

    @property
    def attribute_set(self) -> FrozenSet[Attribute]:
        return frozenset(self.attributes)

    def closure_for(self, attributes: Iterable[Attribute]) -> Optional[Closure]:
        """Найти предвычисленное замыкание по левой части"""
        return self._closure_index.get(frozenset(attributes))

    def is_key_or_superkey(self, attributes: Iterable[Attribute]) -> bool:
        """Набор атрибутов совпадает с минимальным ключом или суперключом"""
        target = frozenset(attributes)
        return any(c.left_set == target for c in self.minimum_keys + self.superkeys)

    def with_stage(self, **changes) -> "AnalyzedRelation":
        """Новый снимок с добавленными результатами очередной стадии"""
        return replace(self, **changes)

    def to_relation(self) -> Relation:
        """Вернуть "сырое" отношение с теми же атрибутами и зависимостями"""
        return Relation(
            self.name,
            list(self.attributes),
            list(self.functional_dependencies),
            list(self.multivalued_dependencies),
        )

    def __repr__(self):
        return f"{self.name}({attribute_names(self.attributes)})"


@dataclass
class DecompositionStep:
    """Класс для представления шага декомпозиции"""
    original_relation: Relation
    resulting_relations: List[Relation]
    reason: str
    violated_dependency: Optional[FunctionalDependency] = None

    def __repr__(self):
        result_str = ", ".join([rel.name for rel in self.resulting_relations])
        return f"Декомпозиция {self.original_relation.name} → [{result_str}]: {self.reason}"


@dataclass
class NormalizationResult:
    """Класс для представления результата нормализации"""
    original_form: NormalForm
    target_form: NormalForm
    original_relation: Relation
    decomposed_relations: List[Relation]
    steps: List[DecompositionStep]
    preserved_dependencies: List[FunctionalDependency]
    lost_dependencies: List[FunctionalDependency]
    initial_relations: List[Relation] = field(default_factory=list)
    source: str = "relation"
    decomposition_needed: bool = True
    message: str = ""

    def preserves_dependencies(self) -> bool:
        """Все ФЗ минимального покрытия сохранились в результирующих отношениях"""
        return len(self.lost_dependencies) == 0

    def had_subsumed_relations(self) -> bool:
        """Удаление поглощенных отношений что-то убрало"""
        return len(self.initial_relations) != len(self.decomposed_relations)

    def get_summary(self) -> str:
        """Получить краткое описание результата"""
        summary = f"Нормализация из {self.original_form.value} в {self.target_form.value}\n"
        summary += f"Исходное отношение: {self.original_relation}\n"
        if self.message:
            summary += f"{self.message}\n"
        if self.had_subsumed_relations():
            summary += f"Начальный набор отношений: {len(self.initial_relations)}\n"
            for rel in self.initial_relations:
                summary += f"  - {rel.describe()}\n"
            summary += "Итоговый набор (без дубликатов и поглощенных отношений):\n"
        summary += f"Результирующие отношения: {len(self.decomposed_relations)}\n"
        for rel in self.decomposed_relations:
            summary += f"  - {rel.describe()}\n"
        if self.lost_dependencies:
            summary += f"Потерянные зависимости: {len(self.lost_dependencies)}\n"
            for fd in self.lost_dependencies:
                summary += f"  - {fd}\n"
        else:
            summary += "Зависимости минимального покрытия не потеряны\n"
        return summary


@dataclass
class BCNFComparison:
    """Две стратегии декомпозиции в НФБК и выбранная из них"""
    from_relation: NormalizationResult
    from_3nf: NormalizationResult
    chosen: NormalizationResult

    @property
    def candidates(self) -> List[NormalizationResult]:
        return [self.from_relation, self.from_3nf]
