"""
Модуль с алгоритмами декомпозиции в 3НФ и НФБК
"""
import logging
from typing import List, Sequence, Tuple

from analyzer import analyze_relation
from fd_algorithms import FDAlgorithms
from models import (
    AnalyzedRelation, BCNFComparison, DecompositionStep, FunctionalDependency,
    NormalForm, NormalizationResult, Relation, attribute_names, is_subset
)

logger = logging.getLogger(__name__)

SOURCE_RELATION = "relation"
SOURCE_3NF = "3nf"


class Decomposer:
    """Класс для выполнения декомпозиции отношений"""

    @staticmethod
    def decompose_to_3nf(relation: AnalyzedRelation, force: bool = False) -> NormalizationResult:
        """
        Декомпозиция отношения в третью нормальную форму.
        Использует алгоритм синтеза

        Args:
            relation: Проанализированное отношение
            force: Выполнить синтез, даже если отношение уже в 3НФ
        """
        if not relation.minimal_cover:
            return Decomposer._unchanged(
                relation, NormalForm.THIRD_NF,
                "Минимальное покрытие пусто, поэтому отношение уже в 3НФ.")
        if relation.normal_forms.is_3nf and not force:
            return Decomposer._unchanged(
                relation, NormalForm.THIRD_NF,
                "Отношение уже в 3НФ. Декомпозиция не нужна.")

        single_cover = FDAlgorithms.split_cover(relation.minimal_cover)
        working: List[Relation] = []
        placed = set()

        # Шаг 1: Для каждой ФЗ покрытия создать отношение из атрибутов обеих частей
        for fd in relation.minimal_cover:
            attrs = list(fd.determinant) + list(fd.dependent)
            working.append(Relation(
                f"{relation.name}_3nf_{len(working) + 1}",
                attrs,
                FDAlgorithms.project_fds(attrs, single_cover)
            ))
            placed.update(attrs)

        # Шаг 2: Неразмещенные атрибуты - в отдельное отношение
        missing = [a for a in relation.attributes if a not in placed]
        if missing:
            logger.debug("%s: атрибуты вне ФЗ покрытия: %s", relation.name, missing)
            working.append(Relation(
                f"{relation.name}_3nf_{len(working) + 1}",
                missing,
                FDAlgorithms.project_fds(missing, single_cover)
            ))

        # Шаг 3: Проверить, содержит ли хотя бы одно отношение ключ
        has_key = any(
            is_subset(key.determinant, rel.attributes)
            for key in relation.minimum_keys
            for rel in working
        )
        if not has_key and relation.minimum_keys:
            key_attrs = list(relation.minimum_keys[0].determinant)
            logger.debug("%s: добавлено отношение с ключом {%s}", relation.name, attribute_names(key_attrs))
            working.append(Relation(f"{relation.name}_3nf_{len(working) + 1}", key_attrs, []))

        # Шаг 4: Удалить дубликаты и поглощенные отношения
        final_relations = Decomposer._remove_subsumed(working)

        original = relation.to_relation()
        step = DecompositionStep(
            original_relation=original,
            resulting_relations=final_relations,
            reason="Декомпозиция в 3НФ методом синтеза"
        )
        preserved, lost = Decomposer._check_dependency_preservation(relation.minimal_cover, final_relations)

        message = "Декомпозиция в 3НФ методом синтеза по минимальному покрытию."
        if not has_key:
            message += " Ни одно отношение не содержало ключ, добавлено отношение с ключом."

        return NormalizationResult(
            original_form=relation.normal_forms.highest_form,
            target_form=NormalForm.THIRD_NF,
            original_relation=original,
            decomposed_relations=final_relations,
            steps=[step],
            preserved_dependencies=preserved,
            lost_dependencies=lost,
            initial_relations=working,
            message=message,
        )

    @staticmethod
    def decompose_to_bcnf(relation: AnalyzedRelation) -> NormalizationResult:
        """
        Декомпозиция отношения в нормальную форму Бойса-Кодда
        (источник - само отношение)
        """
        unchanged = Decomposer._bcnf_unchanged(relation, SOURCE_RELATION)
        if unchanged is not None:
            return unchanged

        initial, steps = Decomposer._split_bcnf(relation.to_relation())
        return Decomposer._bcnf_result(relation, initial, steps, SOURCE_RELATION,
                                       "Декомпозиция в НФБК, источник - исходное отношение.")

    @staticmethod
    def decompose_to_bcnf_from_3nf(relation: AnalyzedRelation) -> NormalizationResult:
        """
        Декомпозиция в НФБК, где источники - отношения синтеза 3НФ
        (синтез выполняется принудительно)
        """
        unchanged = Decomposer._bcnf_unchanged(relation, SOURCE_3NF)
        if unchanged is not None:
            return unchanged

        three_nf = Decomposer.decompose_to_3nf(relation, force=True)
        initial: List[Relation] = []
        steps = list(three_nf.steps)
        for sub_relation in three_nf.decomposed_relations:
            sub_results, sub_steps = Decomposer._split_bcnf(sub_relation)
            initial.extend(sub_results)
            steps.extend(sub_steps)

        return Decomposer._bcnf_result(relation, initial, steps, SOURCE_3NF,
                                       "Декомпозиция в НФБК, источники - отношения 3НФ.")

    @staticmethod
    def choose_bcnf_decomposition(relation: AnalyzedRelation) -> BCNFComparison:
        """
        Выполнить обе стратегии декомпозиции в НФБК и выбрать лучшую.

        Критерии: меньше потерянных ФЗ, затем меньше отношений,
        при равенстве - стратегия от 3НФ.
        """
        from_relation = Decomposer.decompose_to_bcnf(relation)
        from_3nf = Decomposer.decompose_to_bcnf_from_3nf(relation)

        chosen = min(
            [from_3nf, from_relation],
            key=lambda r: (len(r.lost_dependencies),
                           len(r.decomposed_relations),
                           0 if r.source == SOURCE_3NF else 1)
        )
        logger.debug("%s: выбрана стратегия НФБК '%s'", relation.name, chosen.source)
        return BCNFComparison(from_relation=from_relation, from_3nf=from_3nf, chosen=chosen)

    @staticmethod
    def _split_bcnf(relation: Relation) -> Tuple[List[Relation], List[DecompositionStep]]:
        """
        Рекурсивное разбиение отношения по каждой ФЗ, нарушающей НФБК.

        Результаты всех разбиений объединяются; дубликаты убираются позже.
        """
        analyzed = analyze_relation(relation)
        violations = analyzed.normal_forms.bcnf_violations
        if analyzed.normal_forms.is_bcnf or not violations:
            return [relation], []

        single_cover = FDAlgorithms.split_cover(analyzed.minimal_cover)
        results: List[Relation] = []
        steps: List[DecompositionStep] = []
        counter = 0

        for fd in violations:
            closure = analyzed.closure_for(fd.determinant)

            # R1: замыкание левой части
            r1_attrs = [a for a in analyzed.attributes if a in closure.right_set]
            counter += 1
            r1 = Relation(f"{relation.name}_{counter}", r1_attrs,
                          FDAlgorithms.project_fds(r1_attrs, single_cover))

            # R2: левая часть + атрибуты вне замыкания
            r2_attrs = [a for a in analyzed.attributes
                        if a in fd.left_set or a not in closure.right_set]
            counter += 1
            r2 = Relation(f"{relation.name}_{counter}", r2_attrs,
                          FDAlgorithms.project_fds(r2_attrs, single_cover))

            steps.append(DecompositionStep(
                original_relation=relation,
                resulting_relations=[r1, r2],
                reason=f"Устранение нарушения НФБК: {fd}",
                violated_dependency=fd
            ))

            for part in (r1, r2):
                part_results, part_steps = Decomposer._split_bcnf(part)
                results.extend(part_results)
                steps.extend(part_steps)

        return results, steps

    @staticmethod
    def _bcnf_unchanged(relation: AnalyzedRelation, source: str):
        if not relation.minimal_cover:
            return Decomposer._unchanged(
                relation, NormalForm.BCNF,
                "Минимальное покрытие пусто, поэтому отношение уже в НФБК.", source)
        if relation.normal_forms.is_bcnf:
            return Decomposer._unchanged(
                relation, NormalForm.BCNF,
                "Отношение уже в НФБК. Декомпозиция не нужна.", source)
        return None

    @staticmethod
    def _bcnf_result(relation: AnalyzedRelation, initial: List[Relation],
                     steps: List[DecompositionStep], source: str, message: str) -> NormalizationResult:
        final_relations = Decomposer._remove_subsumed(initial)
        preserved, lost = Decomposer._check_dependency_preservation(relation.minimal_cover, final_relations)

        if lost:
            message += " Потеряны ФЗ: " + "; ".join(fd.name for fd in lost) + "."
        else:
            message += " ФЗ минимального покрытия не потеряны."

        return NormalizationResult(
            original_form=relation.normal_forms.highest_form,
            target_form=NormalForm.BCNF,
            original_relation=relation.to_relation(),
            decomposed_relations=final_relations,
            steps=steps,
            preserved_dependencies=preserved,
            lost_dependencies=lost,
            initial_relations=initial,
            source=source,
            message=message,
        )

    @staticmethod
    def _unchanged(relation: AnalyzedRelation, target: NormalForm, message: str,
                   source: str = SOURCE_RELATION) -> NormalizationResult:
        original = relation.to_relation()
        return NormalizationResult(
            original_form=relation.normal_forms.highest_form,
            target_form=target,
            original_relation=original,
            decomposed_relations=[original],
            steps=[],
            preserved_dependencies=list(relation.minimal_cover),
            lost_dependencies=[],
            initial_relations=[original],
            source=source,
            decomposition_needed=False,
            message=message,
        )

    @staticmethod
    def _remove_subsumed(relations: Sequence[Relation]) -> List[Relation]:
        """
        Удалить отношения, атрибуты которых содержатся в другом отношении.

        Из одинаковых по составу отношений остается первое.
        """
        removed = [False] * len(relations)
        for i, rel in enumerate(relations):
            if removed[i]:
                continue
            for j, other_rel in enumerate(relations):
                if i != j and not removed[j] and is_subset(other_rel.attributes, rel.attributes):
                    removed[j] = True
        return [rel for i, rel in enumerate(relations) if not removed[i]]

    @staticmethod
    def _check_dependency_preservation(
            cover: Sequence[FunctionalDependency],
            decomposed_relations: Sequence[Relation]
    ) -> Tuple[List[FunctionalDependency], List[FunctionalDependency]]:
        """
        Проверить сохранение ФЗ минимального покрытия после декомпозиции.

        ФЗ сохранена, если ее каноническое имя встречается в минимальном
        покрытии, заново вычисленном для какого-либо результирующего отношения.
        """
        decomposed_names = set()
        for rel in decomposed_relations:
            decomposed_names.update(fd.name for fd in analyze_relation(rel).minimal_cover)

        preserved = [fd for fd in cover if fd.name in decomposed_names]
        lost = [fd for fd in cover if fd.name not in decomposed_names]
        return preserved, lost
