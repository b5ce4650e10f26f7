"""
Алгоритмы для работы с функциональными зависимостями
"""
import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from config import ANALYSIS_PARAMS
from models import Attribute, Closure, FunctionalDependency, unique_dependencies

logger = logging.getLogger(__name__)


class FDAlgorithms:
    """Класс с алгоритмами для работы с функциональными зависимостями"""

    @staticmethod
    def closure_of(attributes: Optional[Iterable[Attribute]],
                   fds: Optional[Sequence[FunctionalDependency]]) -> Optional[Closure]:
        """
        Вычисление замыкания множества атрибутов

        Args:
            attributes: Множество атрибутов
            fds: Список функциональных зависимостей

        Returns:
            Замыкание или None, если множество атрибутов пусто
        """
        if attributes is None or fds is None:
            raise ValueError("Для вычисления замыкания нужны атрибуты и список ФЗ")

        left = set(attributes)
        if not left:
            return None

        closure = set(left)
        applied = set()
        changed = True

        while changed:
            changed = False
            for index, fd in enumerate(fds):
                if index in applied:
                    continue
                # Если детерминант ФЗ содержится в замыкании
                if fd.left_set <= closure:
                    new_attrs = fd.right_set - closure
                    if new_attrs:
                        closure.update(new_attrs)
                        changed = True
                    applied.add(index)

        return Closure(tuple(left), tuple(closure))

    @staticmethod
    def compute_all_closures(attributes: Sequence[Attribute],
                             fds: Sequence[FunctionalDependency]) -> List[Closure]:
        """
        Замыкания всех непустых подмножеств атрибутов.

        Подмножества перебираются двоичным счетчиком от 1 до 2^n - 1:
        бит i выбирает i-й атрибут. Результат отсортирован по размеру левой
        части, затем по порядку атрибутов.
        """
        n = len(attributes)
        if n > ANALYSIS_PARAMS["max_attributes"]:
            message = (f"Отношение содержит {n} атрибутов: перебор {2 ** n - 1} подмножеств "
                       f"может занять много времени")
            if ANALYSIS_PARAMS["strict_attribute_limit"]:
                raise ValueError(message)
            logger.warning(message)

        closures = []
        for counter in range(1, 2 ** n):
            subset = [attributes[bit] for bit in range(n) if counter >> bit & 1]
            closure = FDAlgorithms.closure_of(subset, fds)
            if closure is not None:
                closures.append(closure)

        closures.sort(key=lambda c: c.sort_key())
        logger.debug("Вычислено %d замыканий для %d атрибутов", len(closures), n)
        return closures

    @staticmethod
    def find_keys(attributes: Sequence[Attribute],
                  closures: Sequence[Closure]) -> Tuple[List[Closure], List[Closure]]:
        """
        Разделить полные замыкания на минимальные ключи и суперключи

        Args:
            attributes: Атрибуты отношения
            closures: Замыкания, отсортированные по размеру левой части

        Returns:
            (минимальные_ключи, суперключи)
        """
        all_attrs = frozenset(attributes)
        minimum_keys: List[Closure] = []
        superkeys: List[Closure] = []
        minimum_key_size = None

        for closure in closures:
            if closure.right_set != all_attrs:
                continue
            if minimum_key_size is None:
                minimum_key_size = len(closure.determinant)

            if len(closure.determinant) == minimum_key_size:
                minimum_keys.append(closure)
                continue

            # Сравниваем только с уже найденными ключами, в порядке обнаружения
            if any(key.left_set < closure.left_set for key in minimum_keys):
                superkeys.append(closure)
            else:
                minimum_keys.append(closure)

        return minimum_keys, superkeys

    @staticmethod
    def split_prime_attributes(attributes: Sequence[Attribute],
                               minimum_keys: Sequence[Closure]) -> Tuple[List[Attribute], List[Attribute]]:
        """
        Найти простые и непростые атрибуты

        Returns:
            (простые, непростые) в порядке атрибутов отношения
        """
        in_keys = set()
        for key in minimum_keys:
            in_keys.update(key.determinant)

        non_prime = [a for a in attributes if a not in in_keys]
        prime = [a for a in attributes if a not in non_prime]
        return prime, non_prime

    @staticmethod
    def is_superkey(attributes: Iterable[Attribute], all_attributes: Iterable[Attribute],
                    fds: Sequence[FunctionalDependency]) -> bool:
        """
        Проверка, является ли множество атрибутов суперключом

        Returns:
            True, если атрибуты образуют суперключ
        """
        closure = FDAlgorithms.closure_of(attributes, fds)
        return closure is not None and closure.right_set == frozenset(all_attributes)

    @staticmethod
    def minimal_cover(fds: Sequence[FunctionalDependency],
                      closures: Sequence[Closure]) -> Tuple[List[FunctionalDependency], List[FunctionalDependency]]:
        """
        Каноническое (минимальное) покрытие

        Args:
            fds: Заданные ФЗ отношения
            closures: Предвычисленные замыкания всех подмножеств по этим ФЗ

        Returns:
            (покрытие, заданные_ФЗ_не_вошедшие_в_покрытие)
        """
        if not fds:
            return [], []

        closure_index: Dict[FrozenSet[Attribute], Closure] = {c.left_set: c for c in closures}
        lost: List[FunctionalDependency] = []

        # Шаг 1: Разделить правые части
        split_fds = []
        for fd in fds:
            if fd.is_proper():
                split_fds.extend(fd.split())
        split_fds = unique_dependencies(split_fds)

        # Шаг 2: Удалить избыточные атрибуты из левых частей
        reduced_fds = []
        for fd in split_fds:
            if len(fd.determinant) == 1:
                reduced_fds.append(fd)
                continue

            target = fd.dependent[0]
            necessary = []
            for attr in fd.determinant:
                # Без атрибута правая часть не выводится - атрибут нужен
                reduced_left = fd.left_set - {attr}
                if target not in closure_index[reduced_left].right_set:
                    necessary.append(attr)

            if necessary and len(necessary) < len(fd.determinant):
                # Проверяем, что укороченная ФЗ действительно выводится
                if target in closure_index[frozenset(necessary)].right_set:
                    reduced_fds.append(FunctionalDependency(tuple(necessary), fd.dependent))
                    lost.append(fd)
                    continue
            reduced_fds.append(fd)
        reduced_fds = unique_dependencies(reduced_fds)

        # Шаг 3: Удалить избыточные ФЗ (один проход слева направо)
        blocked = [False] * len(reduced_fds)
        minimal_fds = []
        for i, fd in enumerate(reduced_fds):
            other_fds = [other for j, other in enumerate(reduced_fds) if j != i and not blocked[j]]
            closure = FDAlgorithms.closure_of(fd.determinant, other_fds)
            if fd.dependent[0] in closure.right_set:
                blocked[i] = True
                lost.append(fd)
            else:
                minimal_fds.append(fd)

        # Шаг 4: Объединить ФЗ с одинаковой левой частью
        groups: Dict[FrozenSet[Attribute], List[Attribute]] = {}
        for fd in minimal_fds:
            groups.setdefault(fd.left_set, []).extend(fd.dependent)
        cover = [FunctionalDependency(tuple(left), tuple(right)) for left, right in groups.items()]

        # Шаг 5: Сортировка по размеру левой части и имени
        cover.sort(key=lambda f: f.sort_key())
        lost = unique_dependencies(lost)
        logger.debug("Минимальное покрытие: %s; исключены: %s", cover, lost)
        return cover, lost

    @staticmethod
    def derived_dependencies(closures: Sequence[Closure],
                             known_fds: Iterable[FunctionalDependency] = ()) -> List[FunctionalDependency]:
        """
        Все нетривиальные ФЗ с одним атрибутом справа, выводимые из замыканий

        Args:
            closures: Замыкания отношения
            known_fds: Уже известные ФЗ (в результат не попадают)

        Returns:
            Новые ФЗ, отсортированные по размеру левой части и имени
        """
        seen = {fd.name for fd in known_fds}
        derived = []
        for closure in closures:
            for attr in closure.closure:
                if attr in closure.left_set:
                    continue
                fd = FunctionalDependency(closure.determinant, (attr,))
                if fd.name not in seen:
                    seen.add(fd.name)
                    derived.append(fd)

        derived.sort(key=lambda f: f.sort_key())
        return derived

    @staticmethod
    def split_cover(cover: Iterable[FunctionalDependency]) -> List[FunctionalDependency]:
        """Покрытие в форме ФЗ с одним атрибутом справа"""
        result = []
        for fd in cover:
            result.extend(fd.split())
        return unique_dependencies(result)

    @staticmethod
    def project_fds(attributes: Iterable[Attribute],
                    fds: Iterable[FunctionalDependency]) -> List[FunctionalDependency]:
        """
        Проецировать ФЗ на подмножество атрибутов.

        ФЗ попадает в проекцию, только если все атрибуты обеих ее частей
        входят в подмножество.
        """
        attr_set = frozenset(attributes)
        return [fd for fd in fds if fd.attribute_set <= attr_set]
