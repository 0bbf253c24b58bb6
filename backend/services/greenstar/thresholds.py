"""
Credit threshold table.

Thresholds are loaded once into a read-only mapping keyed by
``(BuildingLayer, CreditType)``. A lookup for an unregistered pair is a
configuration error, never a silent "not achievable".
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Tuple

from shared.models.exceptions import ConfigurationError
from .models import BuildingLayer, CreditType, CreditThreshold

logger = logging.getLogger(__name__)

ThresholdKey = Tuple[BuildingLayer, CreditType]


class CreditThresholdTable:
    """Immutable registry of credit thresholds"""

    def __init__(self, thresholds: Iterable[CreditThreshold]):
        table: Dict[ThresholdKey, CreditThreshold] = {}
        credit_types: List[CreditType] = []

        for threshold in thresholds:
            key = (threshold.building_layer, threshold.credit_type)
            if key in table:
                raise ConfigurationError(
                    f"Duplicate credit threshold for {threshold.building_layer.value} / {threshold.credit_type.value}"
                )
            table[key] = threshold
            if threshold.credit_type not in credit_types:
                credit_types.append(threshold.credit_type)

        self._table = MappingProxyType(table)
        self._credit_types: Tuple[CreditType, ...] = tuple(credit_types)

    @property
    def credit_types(self) -> Tuple[CreditType, ...]:
        """Registered credit types in registration order"""
        return self._credit_types

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self):
        return iter(self._table.values())

    def __contains__(self, key: ThresholdKey) -> bool:
        return key in self._table

    def find(self, layer: BuildingLayer, credit_type: CreditType) -> Optional[CreditThreshold]:
        return self._table.get((layer, credit_type))

    def get(self, layer: BuildingLayer, credit_type: CreditType) -> CreditThreshold:
        threshold = self.find(layer, credit_type)
        if threshold is None:
            logger.error(f"No credit threshold registered for {layer.value} / {credit_type.value}")
            raise ConfigurationError(
                f"Compliance catalog incomplete: no threshold for {layer.value} / {credit_type.value}"
            )
        return threshold

    def missing_pairs(self, layers: Iterable[BuildingLayer]) -> List[ThresholdKey]:
        """(layer, credit) pairs that would be evaluated but have no threshold"""
        return [
            (layer, credit_type)
            for layer in layers
            for credit_type in self._credit_types
            if (layer, credit_type) not in self._table
        ]

    def validate_complete(self, layers: Iterable[BuildingLayer]) -> None:
        missing = self.missing_pairs(layers)
        if missing:
            pairs = ", ".join(f"{layer.value} / {credit.value}" for layer, credit in missing)
            raise ConfigurationError(f"Compliance catalog incomplete: missing thresholds for {pairs}")


# (good practice, best practice, minimum RPV, description) per credit
_DEFAULT_CREDIT_RULES = [
    (CreditType.CORPORATE_COMMITMENT_CLIMATE, 0.50, 0.75, 10,
     "Share of products by cost from manufacturers with climate commitments"),
    (CreditType.ENVIRONMENTAL_MANAGEMENT, 0.50, 0.75, 10,
     "Share of products by cost from manufacturers with environmental management systems"),
    (CreditType.OCCUPANT_HEALTH_SAFETY, 0.60, 0.80, 15,
     "Share of products by cost meeting occupant health and safety requirements"),
    (CreditType.TRANSPARENT_CHAIN_CUSTODY, 0.40, 0.70, 12,
     "Share of products by cost with transparent supply chains"),
    (CreditType.ENERGY_USE_REDUCTION, 0.55, 0.80, 15,
     "Share of products by cost with energy reduction measures"),
    (CreditType.CARBON_EMISSIONS_REDUCTION, 0.50, 0.75, 12,
     "Share of products by cost with carbon reduction measures"),
    (CreditType.INGREDIENT_DISCLOSURE, 0.70, 0.90, 10,
     "Share of products by cost with full ingredient disclosure"),
    (CreditType.WASTE_GENERATION_REDUCTION, 0.45, 0.70, 12,
     "Share of products by cost with waste reduction measures"),
]

DEFAULT_CREDIT_THRESHOLDS: Tuple[CreditThreshold, ...] = tuple(
    CreditThreshold(
        building_layer=layer,
        credit_type=credit_type,
        min_percentage=good,
        best_practice_percentage=best,
        minimum_rpv=min_rpv,
        points=1.0,
        description=description,
    )
    for credit_type, good, best, min_rpv, description in _DEFAULT_CREDIT_RULES
    for layer in BuildingLayer
)

DEFAULT_THRESHOLD_TABLE = CreditThresholdTable(DEFAULT_CREDIT_THRESHOLDS)
