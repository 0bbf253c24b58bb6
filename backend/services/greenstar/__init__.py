"""
Green Star Responsible Products Service

This service scores construction projects against the Green Star Responsible
Products credits, computing the certified share of each building layer's cost
and rolling the per-credit results into a weighted project summary.
"""

from .models import (
    AchievementLevel,
    BuildingLayer,
    CalculationSummary,
    CategoryType,
    Certification,
    ComplianceResult,
    CreditThreshold,
    CreditType,
    Initiative,
    Product,
    ProjectData,
    VerificationStatus,
    LAYER_WEIGHTS,
)

from .catalog import InitiativeCatalog, SAMPLE_INITIATIVES
from .thresholds import CreditThresholdTable, DEFAULT_CREDIT_THRESHOLDS
from .evaluator import CreditEvaluator
from .score import ResponsibleProductsCalculator, calculate_project_compliance
from .config import settings

__version__ = "1.0.0"
__all__ = [
    "AchievementLevel",
    "BuildingLayer",
    "CalculationSummary",
    "CategoryType",
    "Certification",
    "ComplianceResult",
    "CreditThreshold",
    "CreditType",
    "Initiative",
    "Product",
    "ProjectData",
    "VerificationStatus",
    "LAYER_WEIGHTS",
    "InitiativeCatalog",
    "SAMPLE_INITIATIVES",
    "CreditThresholdTable",
    "DEFAULT_CREDIT_THRESHOLDS",
    "CreditEvaluator",
    "ResponsibleProductsCalculator",
    "calculate_project_compliance",
    "settings"
]
