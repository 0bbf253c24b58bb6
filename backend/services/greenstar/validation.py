import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from shared.models.exceptions import InvalidInputError
from .models import Certification, Product, ProjectData

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationResult", prefix: str = "") -> None:
        self.errors.extend(f"{prefix}{e}" for e in other.errors)
        self.warnings.extend(f"{prefix}{w}" for w in other.warnings)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class DataValidator:
    """Checks project input before any compliance arithmetic runs"""

    def __init__(self, layer_cost_tolerance: float = 0.01, high_cost_warning: float = 1_000_000):
        self.layer_cost_tolerance = layer_cost_tolerance
        self.high_cost_warning = high_cost_warning

    def validate_certification(self, certification: Certification, on_date: date) -> ValidationResult:
        result = ValidationResult()
        if not certification.certificate_number or not certification.certificate_number.strip():
            result.warnings.append("Certificate number is missing")
        if certification.is_expired(on_date):
            result.warnings.append(
                f"Certificate {certification.certificate_number} expired on {certification.expiry_date.isoformat()}"
            )
        if certification.expiry_date is not None and certification.expiry_date < certification.issue_date:
            result.warnings.append(
                f"Certificate {certification.certificate_number} expires before it was issued"
            )
        return result

    def validate_product(self, product: Product, on_date: date) -> ValidationResult:
        result = ValidationResult()

        if not product.product_id or not product.product_id.strip():
            result.errors.append("Product ID is required and cannot be empty")

        if not _is_number(product.cost):
            result.errors.append("Product cost must be a finite number")
        elif product.cost < 0:
            result.errors.append(f"Product cost cannot be negative ({product.cost})")
        elif product.cost > self.high_cost_warning:
            result.warnings.append(f"Product cost is unusually high ({product.cost:,.0f})")

        if not _is_number(product.quantity) or product.quantity <= 0:
            result.errors.append("Product quantity must be greater than zero")

        if not product.building_layers:
            result.warnings.append("No building layer specified - product will not contribute to compliance")

        if not product.certifications:
            result.warnings.append("Product has no certifications - will not contribute to compliance")
        for index, cert in enumerate(product.certifications, start=1):
            result.merge(self.validate_certification(cert, on_date), prefix=f"Certification {index}: ")

        return result

    def validate_project(self, project: ProjectData, on_date: Optional[date] = None) -> ValidationResult:
        on_date = on_date or project.submission_date
        result = ValidationResult()

        if not _is_number(project.total_project_cost):
            result.errors.append("Total project cost must be a finite number")
        elif project.total_project_cost < 0:
            result.errors.append(f"Total project cost cannot be negative ({project.total_project_cost})")

        layer_total = 0.0
        for layer, cost in project.building_layer_costs.items():
            if not _is_number(cost):
                result.errors.append(f"{layer.value} layer cost must be a finite number")
            elif cost < 0:
                result.errors.append(f"{layer.value} layer cost cannot be negative ({cost})")
            else:
                layer_total += cost

        for index, product in enumerate(project.products, start=1):
            result.merge(
                self.validate_product(product, on_date),
                prefix=f"Product {index} ({product.product_name}): ",
            )
            unallocated = [layer for layer in product.building_layers if layer not in project.building_layer_costs]
            if unallocated:
                names = ", ".join(layer.value for layer in unallocated)
                result.warnings.append(
                    f"Product {index} ({product.product_name}): no cost allocated to layer(s) {names}"
                )

        # Layer allocations may drift slightly from the total through rounding
        if result.is_valid and layer_total > 0:
            allowed = project.total_project_cost * (1 + self.layer_cost_tolerance)
            if project.total_project_cost == 0:
                result.warnings.append(
                    f"Building layer costs ({layer_total:,.2f}) are allocated but total project cost is zero; "
                    "overall score will be 0"
                )
            elif layer_total > allowed:
                result.warnings.append(
                    f"Building layer costs ({layer_total:,.2f}) exceed total project cost "
                    f"({project.total_project_cost:,.2f})"
                )

        return result

    def ensure_valid(self, project: ProjectData, on_date: Optional[date] = None) -> List[str]:
        """Raise InvalidInputError on errors; return warnings otherwise"""
        result = self.validate_project(project, on_date)
        if not result.is_valid:
            logger.warning(f"Rejected project {project.project_id}: {result.errors}")
            raise InvalidInputError(
                f"Invalid project data: {'; '.join(result.errors)}",
                errors=result.errors,
            )
        for warning in result.warnings:
            logger.warning(f"Project {project.project_id}: {warning}")
        return result.warnings
