"""
Модуль для анализа нормальных форм отношений
"""
import logging
from typing import List, Tuple

from fd_algorithms import FDAlgorithms
from models import (
    AnalyzedRelation, FunctionalDependency, MultivaluedDependency, NormalForm,
    NormalFormResult, PartialDependency, Relation, attribute_names, unique_dependencies
)

logger = logging.getLogger(__name__)

_3NF_CONDITIONS = ("(1) правая часть содержится в левой, "
                   "(2) левая часть - суперключ (или минимальный ключ) отношения, или "
                   "(3) каждый атрибут правой части входит в некоторый минимальный ключ")
_BCNF_CONDITIONS = ("(1) правая часть содержится в левой, или "
                    "(2) левая часть - суперключ (или минимальный ключ) отношения")
_MVD_TRIVIALITY = ("МЗД тривиальна, если (1) правая часть содержится в левой, или "
                   "(2) обе части вместе покрывают все атрибуты отношения")


def analyze_relation(relation: Relation) -> AnalyzedRelation:
    """
    Полный анализ отношения.

    Стадии выполняются в порядке зависимостей: замыкания, ключи, простые
    атрибуты, минимальное покрытие, выведенные ФЗ, нормальные формы.
    Исходное отношение не меняется.
    """
    if not relation.passed_integrity_checks:
        raise ValueError(f"Отношение {relation.name} не прошло проверку целостности: "
                         f"{relation.integrity_error}")

    snapshot = AnalyzedRelation(
        name=relation.name,
        attributes=tuple(relation.attributes),
        functional_dependencies=tuple(relation.functional_dependencies),
        multivalued_dependencies=tuple(relation.multivalued_dependencies),
    )

    closures = FDAlgorithms.compute_all_closures(snapshot.attributes, snapshot.functional_dependencies)
    minimum_keys, superkeys = FDAlgorithms.find_keys(snapshot.attributes, closures)
    prime, non_prime = FDAlgorithms.split_prime_attributes(snapshot.attributes, minimum_keys)
    snapshot = snapshot.with_stage(
        closures=tuple(closures),
        minimum_keys=tuple(minimum_keys),
        superkeys=tuple(superkeys),
        prime_attributes=tuple(prime),
        non_prime_attributes=tuple(non_prime),
    )

    cover, cover_lost = FDAlgorithms.minimal_cover(snapshot.functional_dependencies, closures)
    derived = FDAlgorithms.derived_dependencies(
        closures, FDAlgorithms.split_cover(snapshot.functional_dependencies))
    snapshot = snapshot.with_stage(
        minimal_cover=tuple(cover),
        cover_lost_dependencies=tuple(cover_lost),
        derived_dependencies=tuple(derived),
    )

    normal_forms = NormalFormAnalyzer(snapshot).evaluate()
    logger.debug("%s: наивысшая нормальная форма %s", relation.name, normal_forms.highest_form.value)
    return snapshot.with_stage(normal_forms=normal_forms)


class NormalFormAnalyzer:
    """Класс для анализа нормальных форм"""

    def __init__(self, relation: AnalyzedRelation):
        self.relation = relation
        self.candidate_keys = relation.minimum_keys
        self.prime_attributes = set(relation.prime_attributes)
        self.non_prime_attributes = set(relation.non_prime_attributes)

    def check_1nf(self) -> Tuple[bool, str]:
        """
        Проверка первой нормальной формы

        Returns:
            (соответствует_1НФ, пояснение)
        """
        # Атомарность значений не проверяется: 1НФ предполагается
        return True, ("Отношение считается находящимся в 1НФ: предполагается, что каждый атрибут "
                      "содержит ровно одно значение в каждой строке.")

    def find_partial_dependencies(self) -> List[PartialDependency]:
        """Непростые атрибуты, зависящие от собственного подмножества составного ключа"""
        partial = []
        found = set()
        for key in self.candidate_keys:
            if len(key.determinant) <= 1:
                continue
            non_primes = [a for a in key.closure if a in self.non_prime_attributes]
            for attr in non_primes:
                for closure in self.relation.closures:
                    if len(closure.determinant) >= len(key.determinant):
                        break
                    if not closure.left_set < key.left_set:
                        continue
                    if attr in closure.right_set and attr not in closure.left_set:
                        if attr not in found:
                            found.add(attr)
                            partial.append(PartialDependency(attr, closure, key))
                        break
        return partial

    def check_2nf(self, is_1nf: bool = True) -> Tuple[bool, List[PartialDependency], str]:
        """
        Проверка второй нормальной формы

        Returns:
            (соответствует_2НФ, частичные_зависимости, пояснение)
        """
        if not is_1nf:
            return False, [], "Отношение не в 2НФ, так как оно не в 1НФ."

        # Если все ключи состоят из одного атрибута, отношение автоматически в 2НФ
        if all(len(key.determinant) == 1 for key in self.candidate_keys):
            return True, [], ("Отношение в 2НФ: оно в 1НФ и не имеет составных минимальных ключей "
                              "(ключей из нескольких атрибутов).")

        partial = self.find_partial_dependencies()
        if not partial:
            return True, [], ("Отношение в 2НФ: оно в 1НФ и нет частичных зависимостей от "
                              "составного минимального ключа.")

        details = " ".join(
            f"Атрибут {p.attribute.name} определяется атрибутами {{{attribute_names(p.subset.determinant)}}}, "
            f"а должен определяться только полным составным ключом {{{attribute_names(p.key.determinant)}}}."
            for p in partial
        )
        return False, partial, ("Отношение не в 2НФ: есть частичная зависимость от составного "
                                "минимального ключа. Непростой атрибут не должен определяться "
                                "собственным подмножеством составного ключа. " + details)

    def find_3nf_violations(self) -> List[FunctionalDependency]:
        """ФЗ минимального покрытия, не удовлетворяющие ни одному условию 3НФ"""
        violations = []
        for fd in self.relation.minimal_cover:
            if fd.is_trivial():
                continue
            if self.relation.is_key_or_superkey(fd.determinant):
                continue
            # Каждый атрибут правой части входит в какой-либо минимальный ключ
            if all(attr in self.prime_attributes for attr in fd.dependent):
                continue
            violations.append(fd)
        return violations

    def check_3nf(self, is_2nf: bool) -> Tuple[bool, List[FunctionalDependency], str]:
        """
        Проверка третьей нормальной формы

        Returns:
            (соответствует_3НФ, нарушающие_ФЗ, пояснение)
        """
        violations = self.find_3nf_violations()
        if not violations and is_2nf:
            return True, [], f"Отношение в 3НФ: оно в 2НФ и каждая ФЗ удовлетворяет условию: {_3NF_CONDITIONS}."

        status = "оно в 2НФ, но" if is_2nf else "оно не в 2НФ и"
        message = (f"Отношение не в 3НФ: {status} не все ФЗ удовлетворяют хотя бы одному условию: "
                   f"{_3NF_CONDITIONS}.")
        if violations:
            message += f" Нарушающие ФЗ: {'; '.join(fd.name for fd in violations)}."
        return False, violations, message

    def find_bcnf_violations(self) -> List[FunctionalDependency]:
        """
        ФЗ, нарушающие НФБК (нетривиальные, левая часть - не ключ).

        Список вычисляется независимо от статуса 3НФ и используется
        при декомпозиции.
        """
        violations = []
        for fd in self.relation.minimal_cover:
            if fd.is_trivial():
                continue
            if not self.relation.is_key_or_superkey(fd.determinant):
                violations.append(fd)
        return violations

    def check_bcnf(self, is_3nf: bool) -> Tuple[bool, List[FunctionalDependency], str]:
        """
        Проверка нормальной формы Бойса-Кодда

        Returns:
            (соответствует_НФБК, нарушающие_ФЗ, пояснение)
        """
        violations = self.find_bcnf_violations()
        if not violations and is_3nf:
            return True, [], f"Отношение в НФБК: оно в 3НФ и каждая ФЗ удовлетворяет условию: {_BCNF_CONDITIONS}."

        status = "оно в 3НФ, но" if is_3nf else "оно не в 3НФ и"
        message = (f"Отношение не в НФБК: {status} не все ФЗ удовлетворяют хотя бы одному условию: "
                   f"{_BCNF_CONDITIONS}.")
        if violations:
            message += f" Нарушающие ФЗ: {'; '.join(fd.name for fd in violations)}."
        return False, violations, message

    def is_trivial_mvd(self, mvd: MultivaluedDependency) -> bool:
        if mvd.right_set <= mvd.left_set:
            return True
        return len(mvd.attribute_set) == len(self.relation.attributes)

    def check_4nf(self, is_bcnf: bool) -> Tuple[bool, List[MultivaluedDependency], str]:
        """
        Проверка четвертой нормальной формы

        Каждая ФЗ покрытия A -> B рассматривается и как МЗД A ->-> B.

        Returns:
            (соответствует_4НФ, нарушающие_МЗД, пояснение)
        """
        promoted = [fd.to_multivalued() for fd in self.relation.minimal_cover]
        combined = unique_dependencies(list(self.relation.multivalued_dependencies) + promoted)

        violations = []
        for mvd in combined:
            if self.is_trivial_mvd(mvd):
                continue
            if self.relation.is_key_or_superkey(mvd.determinant):
                continue
            violations.append(mvd)

        if not violations:
            return True, [], ("Отношение в 4НФ: для каждой нетривиальной МЗД левая часть - "
                              f"суперключ (или минимальный ключ) отношения. {_MVD_TRIVIALITY}.")

        status = "оно в НФБК, но" if is_bcnf else "оно не в НФБК и"
        return False, violations, (f"Отношение не в 4НФ: {status} не все нетривиальные МЗД имеют "
                                   f"суперключ в левой части. {_MVD_TRIVIALITY}. "
                                   f"Нарушающие МЗД: {'; '.join(m.name for m in violations)}.")

    def evaluate(self) -> NormalFormResult:
        """Последовательная проверка 1НФ - 4НФ"""
        is_1nf, msg_1nf = self.check_1nf()
        is_2nf, partial, msg_2nf = self.check_2nf(is_1nf)
        is_3nf, violations_3nf, msg_3nf = self.check_3nf(is_2nf)
        is_bcnf, violations_bcnf, msg_bcnf = self.check_bcnf(is_3nf)
        is_4nf, violations_4nf, msg_4nf = self.check_4nf(is_bcnf)

        return NormalFormResult(
            is_1nf=is_1nf,
            is_2nf=is_2nf,
            is_3nf=is_3nf,
            is_bcnf=is_bcnf,
            is_4nf=is_4nf,
            partial_dependencies=tuple(partial),
            third_nf_violations=tuple(violations_3nf),
            bcnf_violations=tuple(violations_bcnf),
            fourth_nf_violations=tuple(violations_4nf),
            messages={
                NormalForm.FIRST_NF: msg_1nf,
                NormalForm.SECOND_NF: msg_2nf,
                NormalForm.THIRD_NF: msg_3nf,
                NormalForm.BCNF: msg_bcnf,
                NormalForm.FOURTH_NF: msg_4nf,
            },
        )

    def determine_normal_form(self) -> Tuple[NormalForm, List[str]]:
        """
        Определить текущую нормальную форму отношения

        Returns:
            (нормальная_форма, пояснения_для_невыполненных_форм)
        """
        result = self.relation.normal_forms or self.evaluate()
        checks = [
            (NormalForm.SECOND_NF, result.is_2nf),
            (NormalForm.THIRD_NF, result.is_3nf),
            (NormalForm.BCNF, result.is_bcnf),
            (NormalForm.FOURTH_NF, result.is_4nf),
        ]
        failed = [result.messages[form] for form, passed in checks if not passed]
        return result.highest_form, failed

    def get_analysis_report(self) -> str:
        """Получить подробный отчет об анализе"""
        rel = self.relation
        result = rel.normal_forms or self.evaluate()

        report = f"Анализ отношения: {rel.name}\n"
        report += "=" * 50 + "\n\n"
        report += f"Атрибуты: {attribute_names(rel.attributes)}\n"

        # Функциональные зависимости
        report += f"\nФункциональные зависимости ({len(rel.functional_dependencies)}):\n"
        for fd in rel.functional_dependencies:
            report += f"  - {fd}\n"

        # Многозначные зависимости
        if rel.multivalued_dependencies:
            report += f"\nМногозначные зависимости ({len(rel.multivalued_dependencies)}):\n"
            for mvd in rel.multivalued_dependencies:
                report += f"  - {mvd}\n"

        # Замыкания с отметками ключей
        report += "\nЗамыкания атрибутов:\n"
        for closure in rel.closures:
            report += f"  {closure}"
            if closure in rel.minimum_keys:
                kind = "составной минимальный ключ" if len(closure.determinant) > 1 else "минимальный ключ"
                report += f" <- {kind}"
            elif closure in rel.superkeys:
                report += " <- суперключ"
            report += "\n"

        composite = sum(1 for key in rel.minimum_keys if len(key.determinant) > 1)
        report += (f"\nМинимальных ключей: {len(rel.minimum_keys)} (составных: {composite}); "
                   f"суперключей (без минимальных): {len(rel.superkeys)}\n")

        # Простые и непростые атрибуты
        report += f"Простые атрибуты: {{{attribute_names(rel.prime_attributes)}}}\n"
        report += f"Непростые атрибуты: {{{attribute_names(rel.non_prime_attributes)}}}\n"

        # Минимальное покрытие
        if rel.minimal_cover:
            report += f"\nМинимальное покрытие F_min = {{ {'; '.join(fd.name for fd in rel.minimal_cover)} }}\n"
        else:
            report += "\nМинимальное покрытие пусто\n"
        if rel.cover_lost_dependencies:
            report += "Не вошли в минимальное покрытие: "
            report += "; ".join(fd.name for fd in rel.cover_lost_dependencies) + "\n"

        # Выведенные ФЗ
        if rel.derived_dependencies:
            report += f"\nВыведенные нетривиальные ФЗ ({len(rel.derived_dependencies)}):\n"
            for fd in rel.derived_dependencies:
                report += f"  - {fd}\n"
        else:
            report += "\nНовых ФЗ, кроме заданных, не выводится\n"

        # Нормальные формы
        report += "\nНормальные формы:\n"
        for form in (NormalForm.FIRST_NF, NormalForm.SECOND_NF, NormalForm.THIRD_NF,
                     NormalForm.BCNF, NormalForm.FOURTH_NF):
            report += f"  {form.value}: {result.messages[form]}\n"
        report += f"\nТекущая нормальная форма: {result.highest_form.value}\n"

        return report
