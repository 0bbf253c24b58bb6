import numpy as np
from datetime import date
from typing import List, Optional, Sequence
import logging

from shared.models.exceptions import GreenStarException, ScoringException
from .catalog import InitiativeCatalog, SAMPLE_CATALOG
from .config import GreenStarSettings, settings as default_settings
from .evaluator import CreditEvaluator
from .models import (
    AchievementLevel, BuildingLayer, CalculationSummary, ComplianceResult,
    ProjectData, LAYER_WEIGHTS
)
from .thresholds import CreditThresholdTable, DEFAULT_THRESHOLD_TABLE
from .utils import format_percentage
from .validation import DataValidator

logger = logging.getLogger(__name__)

ADD_PRODUCTS_RECOMMENDATION = (
    "Add certified products to the project: responsible products credits are earned "
    "only by verified certifications from recognised initiatives"
)
ALLOCATE_COSTS_RECOMMENDATION = (
    "Allocate project costs to building layers so products can be assessed against credit thresholds"
)
ALL_ACHIEVED_RECOMMENDATION = (
    "Excellent! All credits have been achieved. Consider pursuing additional sustainability initiatives."
)


def calculate_overall_score(results: Sequence[ComplianceResult], thresholds: CreditThresholdTable) -> float:
    """
    Weighted mean of result percentages.

    Each result is weighted by its layer weight times the credit's point value,
    so the maximum attainable score is 1.0.
    """
    if not results:
        return 0.0

    percentages = np.array([r.percentage for r in results], dtype=float)
    weights = np.array(
        [LAYER_WEIGHTS[r.building_layer] * thresholds.get(r.building_layer, r.credit_type).points for r in results],
        dtype=float,
    )

    denominator = weights.sum()
    if denominator <= 0:
        return 0.0

    score = float(np.dot(percentages, weights) / denominator)
    return max(0.0, min(score, 1.0))


def determine_overall_achievement(score: float, best_cut: float = 0.85, good_cut: float = 0.60) -> AchievementLevel:
    if score >= best_cut:
        return AchievementLevel.BEST_PRACTICE
    elif score >= good_cut:
        return AchievementLevel.GOOD_PRACTICE
    else:
        return AchievementLevel.NONE


def generate_recommendations(project: ProjectData, results: Sequence[ComplianceResult]) -> List[str]:
    """Improvement suggestions for unachieved credits, largest shortfall first"""
    recommendations = []

    if not project.products:
        recommendations.append(ADD_PRODUCTS_RECOMMENDATION)
    if not results:
        recommendations.append(ALLOCATE_COSTS_RECOMMENDATION)
        return recommendations

    unachieved = [r for r in results if not r.achieved]
    if not unachieved:
        recommendations.append(ALL_ACHIEVED_RECOMMENDATION)
        return recommendations

    # sorted() is stable, so equal shortfalls keep layer/credit order
    for result in sorted(unachieved, key=lambda r: r.shortfall, reverse=True):
        recommendations.append(
            f"{result.building_layer.value} - {result.credit_type.value}: increase compliant products by "
            f"{format_percentage(result.shortfall)} to reach Good Practice "
            f"(currently {format_percentage(result.percentage)}, required {format_percentage(result.threshold)})"
        )
    return recommendations


class ResponsibleProductsCalculator:
    """Drives credit evaluation across a project's building layers and folds the results into a summary"""

    def __init__(
        self,
        thresholds: Optional[CreditThresholdTable] = None,
        catalog: Optional[InitiativeCatalog] = None,
        settings: Optional[GreenStarSettings] = None,
    ):
        self.settings = settings or default_settings
        self.thresholds = thresholds if thresholds is not None else DEFAULT_THRESHOLD_TABLE
        self.catalog = catalog if catalog is not None else SAMPLE_CATALOG
        self.validator = DataValidator(
            layer_cost_tolerance=self.settings.layer_cost_tolerance,
            high_cost_warning=self.settings.high_cost_warning,
        )

    def calculate_project_compliance(
        self,
        project: ProjectData,
        evaluation_date: Optional[date] = None,
    ) -> CalculationSummary:
        evaluation_date = evaluation_date or project.submission_date

        try:
            warnings = self.validator.ensure_valid(project, evaluation_date)

            layers = [layer for layer in BuildingLayer if layer in project.building_layer_costs]
            # Abort before evaluating anything so no partial summary is produced
            self.thresholds.validate_complete(layers)

            evaluator = CreditEvaluator(self.thresholds, self.catalog, evaluation_date)
            results: List[ComplianceResult] = []
            for layer in layers:
                layer_cost = project.building_layer_costs[layer]
                for credit_type in self.thresholds.credit_types:
                    results.append(evaluator.evaluate_credit(layer, credit_type, project.products, layer_cost))

            achieved_credits = sum(1 for r in results if r.achieved)

            if project.total_project_cost > 0:
                overall_score = calculate_overall_score(results, self.thresholds)
            else:
                overall_score = 0.0

            achievement_level = determine_overall_achievement(
                overall_score,
                best_cut=self.settings.best_practice_cut,
                good_cut=self.settings.good_practice_cut,
            )

            summary = CalculationSummary(
                project_id=project.project_id,
                overall_score=overall_score,
                achievement_level=achievement_level,
                achieved_credits=achieved_credits,
                total_possible_credits=len(results),
                total_compliance=results,
                recommendations=generate_recommendations(project, results),
                calculation_date=evaluation_date,
                calculator_version=self.settings.calculator_version,
                warnings=warnings,
            )

            logger.info(
                f"Calculated Green Star compliance for project {project.project_id}: "
                f"score={overall_score:.3f}, level={achievement_level.value}, "
                f"credits={achieved_credits}/{len(results)}"
            )
            return summary

        except GreenStarException:
            raise
        except Exception as e:
            logger.error(f"Unexpected error in Green Star compliance scoring: {e}")
            raise ScoringException(f"Unexpected error during compliance calculation: {e}") from e


def calculate_project_compliance(
    project: ProjectData,
    evaluation_date: Optional[date] = None,
    thresholds: Optional[CreditThresholdTable] = None,
    catalog: Optional[InitiativeCatalog] = None,
) -> CalculationSummary:
    """Calculate the project summary with the default threshold table and initiative catalog"""
    calculator = ResponsibleProductsCalculator(thresholds=thresholds, catalog=catalog)
    return calculator.calculate_project_compliance(project, evaluation_date)
