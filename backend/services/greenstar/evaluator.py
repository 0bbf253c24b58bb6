import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from shared.models.exceptions import InvalidInputError
from .catalog import InitiativeCatalog
from .models import (
    AchievementLevel, BuildingLayer, Certification, ComplianceResult,
    CreditThreshold, CreditType, Product, VerificationStatus, CREDIT_CATEGORIES
)
from .thresholds import CreditThresholdTable

logger = logging.getLogger(__name__)


def determine_achievement_level(percentage: float, threshold: CreditThreshold) -> AchievementLevel:
    """Per-credit achievement level from the threshold's own percentages"""
    if percentage < threshold.min_percentage:
        return AchievementLevel.NONE
    if threshold.best_practice_percentage is not None and percentage >= threshold.best_practice_percentage:
        return AchievementLevel.BEST_PRACTICE
    return AchievementLevel.GOOD_PRACTICE


class CreditEvaluator:
    """Computes the compliant-cost share of a building layer for one credit"""

    def __init__(self, thresholds: CreditThresholdTable, catalog: InitiativeCatalog, evaluation_date: date):
        self.thresholds = thresholds
        self.catalog = catalog
        self.evaluation_date = evaluation_date

    def qualifies(
        self,
        certification: Certification,
        minimum_rpv: Optional[float] = None,
        credit_type: Optional[CreditType] = None,
    ) -> bool:
        """
        Whether a certification counts toward compliant cost on the evaluation date.

        When a credit type is given and the initiative lists categories, the
        credit's category must be one of them. An initiative without categories
        covers every credit.
        """
        if certification.verification_status != VerificationStatus.VERIFIED:
            return False
        if certification.is_expired(self.evaluation_date):
            return False
        if not self.catalog.is_recognised(certification.initiative_id, self.evaluation_date):
            return False

        initiative = self.catalog.get(certification.initiative_id)
        if minimum_rpv is not None and initiative.rpv_score < minimum_rpv:
            return False
        if credit_type is not None and initiative.categories:
            return CREDIT_CATEGORIES[credit_type] in initiative.categories
        return True

    def is_compliant(
        self,
        product: Product,
        minimum_rpv: Optional[float] = None,
        credit_type: Optional[CreditType] = None,
    ) -> bool:
        return any(self.qualifies(cert, minimum_rpv, credit_type) for cert in product.certifications)

    def evaluate_credit(
        self,
        layer: BuildingLayer,
        credit_type: CreditType,
        products: Iterable[Product],
        layer_cost: float,
    ) -> ComplianceResult:
        if layer_cost < 0:
            raise InvalidInputError(f"{layer.value} layer cost cannot be negative ({layer_cost})")

        threshold = self.thresholds.get(layer, credit_type)

        layer_products: Sequence[Product] = [p for p in products if layer in p.building_layers]
        compliant_ids = []
        non_compliant_ids = []
        compliant_cost = 0.0

        for product in layer_products:
            if self.is_compliant(product, threshold.minimum_rpv, credit_type):
                compliant_cost += product.cost
                compliant_ids.append(product.product_id)
            else:
                non_compliant_ids.append(product.product_id)

        # The allocated layer cost is the denominator so unlisted spend counts against the credit
        total_cost = float(layer_cost)
        percentage = compliant_cost / total_cost if total_cost > 0 else 0.0
        percentage = max(0.0, min(percentage, 1.0))

        achieved = percentage >= threshold.min_percentage
        achievement_level = determine_achievement_level(percentage, threshold)
        points_awarded = threshold.points if achieved else 0.0

        logger.debug(
            f"{layer.value} / {credit_type.value}: compliant={compliant_cost:.2f} "
            f"total={total_cost:.2f} pct={percentage:.4f} threshold={threshold.min_percentage:.2f} "
            f"achieved={achieved}"
        )

        return ComplianceResult(
            building_layer=layer,
            credit_type=credit_type,
            percentage=percentage,
            threshold=threshold.min_percentage,
            achieved=achieved,
            achievement_level=achievement_level,
            points_awarded=points_awarded,
            compliant_cost=compliant_cost,
            total_cost=total_cost,
            compliant_product_ids=compliant_ids,
            non_compliant_product_ids=non_compliant_ids,
        )
