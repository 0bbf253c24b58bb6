import csv
import io
from typing import Dict, List, Mapping

from .models import (
    AchievementLevel, BuildingLayer, CalculationSummary, BUILDING_LAYER_INFO, LAYER_WEIGHTS
)

CURRENCY_SYMBOLS = {
    "AUD": "$",
    "NZD": "$",
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
}

# (lower bound, band, colour) on the display scale, highest first
COMPLIANCE_BANDS = [
    (0.85, "excellent", "#16a34a"),
    (0.60, "good", "#2563eb"),
    (0.40, "fair", "#ca8a04"),
    (0.0, "poor", "#dc2626"),
]

ACHIEVEMENT_COLORS = {
    AchievementLevel.BEST_PRACTICE: "#22c55e",
    AchievementLevel.GOOD_PRACTICE: "#f59e0b",
    AchievementLevel.NONE: "#ef4444",
}


def format_currency(amount: float, currency_code: str = "AUD", decimals: int = 2) -> str:
    """Format a monetary amount, e.g. 125000 -> '$125,000.00'"""
    symbol = CURRENCY_SYMBOLS.get(currency_code.upper(), f"{currency_code.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{decimals}f}"


def format_percentage(fraction: float, decimals: int = 1) -> str:
    """Format a fraction in [0, 1] as a percentage, e.g. 0.5 -> '50.0%'"""
    return f"{fraction * 100:.{decimals}f}%"


def compliance_band(fraction: float) -> Dict[str, str]:
    for lower, band, color in COMPLIANCE_BANDS:
        if fraction >= lower:
            return {"band": band, "color": color}
    return {"band": "poor", "color": COMPLIANCE_BANDS[-1][2]}


def achievement_color(level: AchievementLevel) -> str:
    return ACHIEVEMENT_COLORS.get(level, ACHIEVEMENT_COLORS[AchievementLevel.NONE])


def calculate_weighted_score(layer_scores: Mapping[BuildingLayer, float]) -> float:
    """
    Combine per-layer scores using the fixed layer weights.

    The result is normalised by the weights of the layers present, so a
    partial mapping is not penalised for missing layers.
    """
    total_score = 0.0
    total_weight = 0.0
    for layer, score in layer_scores.items():
        weight = LAYER_WEIGHTS[BuildingLayer(layer)]
        total_score += score * weight
        total_weight += weight
    return total_score / total_weight if total_weight > 0 else 0.0


def building_layer_suggestions(layer: BuildingLayer) -> List[str]:
    info = BUILDING_LAYER_INFO.get(layer)
    return list(info["typical_materials"]) if info else []


def export_to_csv(summary: CalculationSummary, currency_code: str = "AUD") -> str:
    """Render a calculation summary as CSV, one row per credit evaluation plus summary rows"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow([
        "Building Layer", "Credit Type", "Total Cost", "Compliant Cost",
        "Percentage", "Threshold", "Achievement Level", "Points Awarded", "Achieved",
    ])
    for result in summary.total_compliance:
        writer.writerow([
            result.building_layer.value,
            result.credit_type.value,
            format_currency(result.total_cost, currency_code),
            format_currency(result.compliant_cost, currency_code),
            format_percentage(result.percentage),
            format_percentage(result.threshold),
            result.achievement_level.value,
            f"{result.points_awarded:g}",
            "Yes" if result.achieved else "No",
        ])

    writer.writerow([])
    writer.writerow(["Overall Score", format_percentage(summary.overall_score)])
    writer.writerow(["Achievement Level", summary.achievement_level.value])
    writer.writerow(["Credits Achieved", f"{summary.achieved_credits}/{summary.total_possible_credits}"])
    return buffer.getvalue()
