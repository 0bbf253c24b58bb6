import pytest
from datetime import date

from shared.models.exceptions import ConfigurationError, InvalidInputError
from services.greenstar.catalog import SAMPLE_CATALOG
from services.greenstar.evaluator import CreditEvaluator, determine_achievement_level
from services.greenstar.models import (
    AchievementLevel, BuildingLayer, CreditThreshold, CreditType, VerificationStatus
)
from services.greenstar.thresholds import CreditThresholdTable

from greenstar_factories import (
    EVAL_DATE, ACTIVE_ID, INACTIVE_ID, LOW_RPV_ID, LAPSED_ID,
    make_catalog, make_cert, make_product, single_threshold_table,
)

CCC = CreditType.CORPORATE_COMMITMENT_CLIMATE


def _evaluator(table=None, evaluation_date=EVAL_DATE):
    return CreditEvaluator(table or single_threshold_table(), make_catalog(), evaluation_date)


# ─────────────────────────────────────────────────────────────────────────────
# SCENARIOS
# ─────────────────────────────────────────────────────────────────────────────

class TestScenarios:
    def test_fully_compliant_structure(self):
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [make_cert()])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)

        assert result.percentage == 1.0
        assert result.achieved is True
        assert result.points_awarded == 10
        assert result.compliant_cost == 100_000
        assert result.total_cost == 100_000
        assert result.compliant_product_ids == ["P1"]

    def test_partially_compliant_envelope(self):
        table = single_threshold_table(layer=BuildingLayer.ENVELOPE, min_percentage=0.6)
        products = [
            make_product("E1", 50_000, [BuildingLayer.ENVELOPE], [make_cert()]),
            make_product("E2", 50_000, [BuildingLayer.ENVELOPE]),
        ]
        result = _evaluator(table).evaluate_credit(BuildingLayer.ENVELOPE, CCC, products, 100_000)

        assert result.percentage == 0.5
        assert result.achieved is False
        assert result.points_awarded == 0
        assert result.non_compliant_product_ids == ["E2"]

    def test_empty_products(self):
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [], 50_000)
        assert result.percentage == 0
        assert result.achieved is False
        assert result.compliant_cost == 0

    def test_zero_layer_cost_gives_zero_percentage(self):
        product = make_product("P1", 100, [BuildingLayer.STRUCTURE], [make_cert()])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 0)
        assert result.percentage == 0.0
        assert result.achieved is False


# ─────────────────────────────────────────────────────────────────────────────
# CERTIFICATION QUALIFICATION
# ─────────────────────────────────────────────────────────────────────────────

class TestCertificationQualification:
    @pytest.mark.parametrize("status", [VerificationStatus.PENDING, VerificationStatus.REJECTED])
    def test_unverified_certification_excluded(self, status):
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [make_cert(status=status)])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.compliant_cost == 0
        assert result.percentage == 0

    def test_expired_certification_excluded(self):
        cert = make_cert(expiry_date=date(2025, 6, 29))
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [cert])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.compliant_cost == 0

    def test_certification_expiring_on_evaluation_date_still_counts(self):
        cert = make_cert(expiry_date=EVAL_DATE)
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [cert])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.compliant_cost == 100_000

    def test_certification_without_expiry_counts(self):
        cert = make_cert(expiry_date=None)
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [cert])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.achieved is True

    def test_inactive_initiative_treated_as_uncertified(self):
        certified = make_product("P1", 60_000, [BuildingLayer.STRUCTURE], [make_cert(INACTIVE_ID)])
        uncertified = make_product("P1", 60_000, [BuildingLayer.STRUCTURE])
        evaluator = _evaluator()

        with_inactive = evaluator.evaluate_credit(BuildingLayer.STRUCTURE, CCC, [certified], 100_000)
        without = evaluator.evaluate_credit(BuildingLayer.STRUCTURE, CCC, [uncertified], 100_000)

        assert with_inactive.compliant_cost == without.compliant_cost == 0
        assert with_inactive.percentage == without.percentage
        assert with_inactive.achieved == without.achieved

    def test_lapsed_initiative_recognition_excluded(self):
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [make_cert(LAPSED_ID)])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.compliant_cost == 0

    def test_unknown_initiative_treated_as_uncertified(self):
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [make_cert("NOT-IN-CATALOG")])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.compliant_cost == 0
        assert result.achieved is False

    def test_rpv_floor_excludes_low_scoring_initiative(self):
        table = single_threshold_table(minimum_rpv=10)
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [make_cert(LOW_RPV_ID)])
        result = _evaluator(table).evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.compliant_cost == 0

    def test_no_rpv_floor_accepts_any_verified_certification(self):
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [make_cert(LOW_RPV_ID)])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.compliant_cost == 100_000

    def test_rpv_floor_is_inclusive(self):
        table = single_threshold_table(minimum_rpv=80)
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], [make_cert(ACTIVE_ID)])
        result = _evaluator(table).evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.compliant_cost == 100_000

    def test_initiative_categories_limit_covered_credits(self):
        table = CreditThresholdTable([
            CreditThreshold(building_layer=BuildingLayer.STRUCTURE, credit_type=credit, min_percentage=0.5)
            for credit in (CreditType.OCCUPANT_HEALTH_SAFETY, CreditType.CARBON_EMISSIONS_REDUCTION)
        ])
        evaluator = CreditEvaluator(table, SAMPLE_CATALOG, EVAL_DATE)
        products = [
            make_product("C2C", 60_000, [BuildingLayer.STRUCTURE], [make_cert("CRADLE-002")]),
            make_product("BARE", 40_000, [BuildingLayer.STRUCTURE]),
        ]

        healthy = evaluator.evaluate_credit(
            BuildingLayer.STRUCTURE, CreditType.OCCUPANT_HEALTH_SAFETY, products, 100_000
        )
        circular = evaluator.evaluate_credit(
            BuildingLayer.STRUCTURE, CreditType.CARBON_EMISSIONS_REDUCTION, products, 100_000
        )

        assert healthy.compliant_cost == 0
        assert healthy.achieved is False
        assert circular.percentage == pytest.approx(0.6)
        assert circular.achieved is True
        assert circular.compliant_product_ids == ["C2C"]

    def test_initiative_without_categories_covers_every_credit(self):
        evaluator = _evaluator()
        cert = make_cert(ACTIVE_ID)
        assert evaluator.qualifies(cert, credit_type=CreditType.INGREDIENT_DISCLOSURE)
        assert evaluator.qualifies(cert, credit_type=CreditType.PACKAGING)

    def test_one_qualifying_certification_among_many_is_enough(self):
        certs = [make_cert(INACTIVE_ID), make_cert(status=VerificationStatus.PENDING), make_cert()]
        product = make_product("P1", 100_000, [BuildingLayer.STRUCTURE], certs)
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.compliant_cost == 100_000


# ─────────────────────────────────────────────────────────────────────────────
# THRESHOLDS AND BOUNDS
# ─────────────────────────────────────────────────────────────────────────────

class TestThresholdBoundary:
    def test_exact_threshold_is_achieved(self):
        products = [
            make_product("A", 50_000, [BuildingLayer.STRUCTURE], [make_cert()]),
            make_product("B", 50_000, [BuildingLayer.STRUCTURE]),
        ]
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, products, 100_000)
        assert result.percentage == 0.5
        assert result.achieved is True

    def test_one_unit_below_threshold_is_not_achieved(self):
        products = [
            make_product("A", 49_999, [BuildingLayer.STRUCTURE], [make_cert()]),
            make_product("B", 50_001, [BuildingLayer.STRUCTURE]),
        ]
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, products, 100_000)
        assert result.percentage < 0.5
        assert result.achieved is False
        assert result.points_awarded == 0

    def test_percentage_clamped_when_compliant_cost_exceeds_layer_cost(self):
        product = make_product("P1", 100_050, [BuildingLayer.STRUCTURE], [make_cert()])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.percentage == 1.0
        assert result.compliant_cost == 100_050

    def test_layer_cost_is_denominator_not_product_sum(self):
        product = make_product("P1", 40_000, [BuildingLayer.STRUCTURE], [make_cert()])
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100_000)
        assert result.percentage == pytest.approx(0.4)
        assert result.total_cost == 100_000

    def test_products_outside_layer_ignored(self):
        products = [
            make_product("S", 100_000, [BuildingLayer.STRUCTURE], [make_cert()]),
            make_product("F", 100_000, [BuildingLayer.FINISHES], [make_cert()]),
        ]
        result = _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, products, 100_000)
        assert result.compliant_product_ids == ["S"]
        assert result.non_compliant_product_ids == []

    def test_missing_threshold_raises_configuration_error(self):
        product = make_product("P1", 100, [BuildingLayer.SYSTEMS], [make_cert()])
        with pytest.raises(ConfigurationError):
            _evaluator().evaluate_credit(BuildingLayer.SYSTEMS, CCC, [product], 100)

    def test_negative_layer_cost_rejected(self):
        with pytest.raises(InvalidInputError):
            _evaluator().evaluate_credit(BuildingLayer.STRUCTURE, CCC, [], -1)


class TestAchievementLevel:
    def _threshold(self, best=0.75):
        return CreditThreshold(
            building_layer=BuildingLayer.STRUCTURE,
            credit_type=CCC,
            min_percentage=0.5,
            best_practice_percentage=best,
        )

    def test_below_minimum(self):
        assert determine_achievement_level(0.49, self._threshold()) == AchievementLevel.NONE

    def test_good_practice(self):
        assert determine_achievement_level(0.5, self._threshold()) == AchievementLevel.GOOD_PRACTICE

    def test_best_practice(self):
        assert determine_achievement_level(0.75, self._threshold()) == AchievementLevel.BEST_PRACTICE

    def test_no_best_practice_threshold_caps_at_good(self):
        assert determine_achievement_level(1.0, self._threshold(best=None)) == AchievementLevel.GOOD_PRACTICE

    def test_result_carries_achievement_level(self):
        table = CreditThresholdTable([self._threshold()])
        product = make_product("P1", 80, [BuildingLayer.STRUCTURE], [make_cert()])
        result = _evaluator(table).evaluate_credit(BuildingLayer.STRUCTURE, CCC, [product], 100)
        assert result.achievement_level == AchievementLevel.BEST_PRACTICE
