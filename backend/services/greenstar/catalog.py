import logging
from datetime import date
from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Tuple

from shared.models.exceptions import ConfigurationError
from .models import CategoryType, Initiative, InitiativeSearchCriteria

logger = logging.getLogger(__name__)


class InitiativeCatalog:
    """
    Read-only view of the recognised initiatives.

    The catalog is supplied by an external provider and refreshed between
    calculations by building a new instance; nothing here mutates it.
    """

    def __init__(self, initiatives: Iterable[Initiative] = ()):
        by_id: Dict[str, Initiative] = {}
        for initiative in initiatives:
            if initiative.initiative_id in by_id:
                raise ConfigurationError(f"Duplicate initiative id in catalog: {initiative.initiative_id}")
            by_id[initiative.initiative_id] = initiative
        self._initiatives = MappingProxyType(by_id)

    def __len__(self) -> int:
        return len(self._initiatives)

    def __iter__(self):
        return iter(self._initiatives.values())

    def __contains__(self, initiative_id: str) -> bool:
        return initiative_id in self._initiatives

    def get(self, initiative_id: str) -> Optional[Initiative]:
        return self._initiatives.get(initiative_id)

    def is_recognised(self, initiative_id: str, on_date: date) -> bool:
        """True when the initiative exists, is active and its recognition has not lapsed"""
        initiative = self._initiatives.get(initiative_id)
        if initiative is None:
            logger.debug(f"Initiative {initiative_id} not in catalog; treating as uncertified")
            return False
        return initiative.is_recognised_on(on_date)

    def search(self, criteria: Optional[InitiativeSearchCriteria] = None) -> List[Initiative]:
        if criteria is None:
            return list(self._initiatives.values())

        results = []
        for initiative in self._initiatives.values():
            if criteria.name and criteria.name.lower() not in initiative.initiative_name.lower():
                continue
            if criteria.category is not None and criteria.category not in initiative.categories:
                continue
            if criteria.minimum_rpv is not None and initiative.rpv_score < criteria.minimum_rpv:
                continue
            if criteria.is_active is not None and initiative.is_active != criteria.is_active:
                continue
            if criteria.recognition_date_from and initiative.recognition_date < criteria.recognition_date_from:
                continue
            if criteria.recognition_date_to and initiative.recognition_date > criteria.recognition_date_to:
                continue
            results.append(initiative)
        return results


SAMPLE_INITIATIVES: Tuple[Initiative, ...] = (
    Initiative(
        initiative_id="GBCA-001",
        initiative_name="Green Building Materials Certification",
        rpv_score=85,
        categories={CategoryType.RESPONSIBLE, CategoryType.HEALTHY},
        recognition_date=date(2024, 1, 15),
        is_active=True,
        description="Comprehensive green building materials certification program",
    ),
    Initiative(
        initiative_id="CRADLE-002",
        initiative_name="Cradle to Cradle Certified",
        rpv_score=92,
        categories={CategoryType.CIRCULAR},
        recognition_date=date(2024, 2, 1),
        is_active=True,
        description="Leading circular economy certification for building products",
    ),
    Initiative(
        initiative_id="ENERGY-003",
        initiative_name="Energy Efficient Products Initiative",
        rpv_score=78,
        categories={CategoryType.POSITIVE},
        recognition_date=date(2024, 3, 10),
        is_active=True,
        description="Certification for energy-efficient building products and systems",
    ),
)

SAMPLE_CATALOG = InitiativeCatalog(SAMPLE_INITIATIVES)
