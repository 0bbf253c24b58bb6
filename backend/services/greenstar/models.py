from datetime import date
from typing import Optional, Dict, Any, List, Set
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BuildingLayer(str, Enum):
    STRUCTURE = "Structure"
    ENVELOPE = "Envelope"
    SYSTEMS = "Systems"
    FINISHES = "Finishes"


class CategoryType(str, Enum):
    RESPONSIBLE = "Responsible"
    HEALTHY = "Healthy"
    POSITIVE = "Positive"
    CIRCULAR = "Circular"
    LEADERSHIP = "Leadership"


class CreditType(str, Enum):
    # Responsible
    CORPORATE_COMMITMENT_CLIMATE = "Corporate Commitment on Climate"
    ENVIRONMENTAL_MANAGEMENT = "Environmental Management"
    CARBON_EMISSIONS_DISCLOSURE = "Carbon Emissions Disclosure"
    SOCIALLY_RESPONSIBLE_EXTRACTION = "Socially Responsible Extraction of Resources"
    TRANSPARENT_CHAIN_CUSTODY = "Transparent Chain of Custody"
    ENVIRONMENTAL_IMPACT_DISCLOSURE = "Environmental Impact Disclosure"

    # Healthy
    OCCUPANT_HEALTH_SAFETY = "Occupant Health and Safety"
    MANUFACTURING_HEALTH_SAFETY = "Manufacturing Health and Safety"
    CHEMICALS_OF_CONCERN = "Chemicals of Concern"
    HEALTH_IMPACTS_DISCLOSURE = "Health Impacts Disclosure"
    INGREDIENT_DISCLOSURE = "Ingredient Disclosure"

    # Positive
    ENERGY_USE_REDUCTION = "Energy Use Reduction"
    ENERGY_SOURCE = "Energy Source"
    IMPACTS_TO_NATURE = "Impacts to Nature"

    # Circular
    MATERIAL_EXTRACTION_IMPACT_REDUCTION = "Material Extraction Impact Reduction"
    CARBON_EMISSIONS_REDUCTION = "Carbon Emissions Reduction"
    WATER_USE_REDUCTION = "Water Use Reduction"
    WASTE_GENERATION_REDUCTION = "Waste Generation Reduction"
    PACKAGING = "Packaging"

    # Leadership
    LEADERSHIP = "Leadership"


class AchievementLevel(str, Enum):
    NONE = "None"
    GOOD_PRACTICE = "Good Practice"
    BEST_PRACTICE = "Best Practice"


class VerificationStatus(str, Enum):
    PENDING = "pending_verification"
    VERIFIED = "verified"
    REJECTED = "rejected"


class FrozenModel(BaseModel):
    """Base for records that must not change during a calculation"""
    model_config = ConfigDict(frozen=True)


class CreditThreshold(FrozenModel):
    """Minimum compliant-cost share needed to achieve a credit in one building layer"""
    building_layer: BuildingLayer
    credit_type: CreditType
    min_percentage: float = Field(..., ge=0.0, le=1.0, description="Compliant cost fraction required (Good Practice)")
    points: float = Field(1.0, gt=0, description="Points awarded when the credit is achieved")
    best_practice_percentage: Optional[float] = Field(None, ge=0.0, le=1.0, description="Compliant cost fraction for Best Practice")
    minimum_rpv: Optional[float] = Field(None, ge=0.0, description="RPV floor a certification's initiative must reach")
    description: str = ""


class Initiative(FrozenModel):
    """Recognised third-party sustainability initiative (Responsible Product Value record)"""
    initiative_id: str = Field(..., min_length=1)
    initiative_name: str
    rpv_score: float = Field(..., ge=0.0, description="Responsible Product Value score")
    categories: Set[CategoryType] = Field(default_factory=set)
    recognition_date: date
    expiry_date: Optional[date] = Field(None, description="End of recognition, if any")
    is_active: bool = True
    description: str = ""

    def is_recognised_on(self, on_date: date) -> bool:
        if not self.is_active:
            return False
        if self.expiry_date is not None and self.expiry_date < on_date:
            return False
        return True


class Certification(FrozenModel):
    initiative_id: str
    certificate_number: str
    issue_date: date
    expiry_date: Optional[date] = None
    verification_status: VerificationStatus = VerificationStatus.PENDING
    rpv_snapshot: Optional[float] = Field(None, description="Initiative RPV at certification time")

    def is_expired(self, on_date: date) -> bool:
        return self.expiry_date is not None and self.expiry_date < on_date


class Product(FrozenModel):
    """Material line item entered for a project"""
    product_id: str
    product_name: str
    manufacturer: str = ""
    description: str = ""
    certifications: List[Certification] = Field(default_factory=list)
    building_layers: List[BuildingLayer] = Field(default_factory=list)
    cost: float
    quantity: float = 1.0
    unit: str = "each"
    category: str = ""
    subcategory: Optional[str] = None


class ProjectData(FrozenModel):
    """Top-level calculation input"""
    project_id: str
    project_name: str
    products: List[Product] = Field(default_factory=list)
    building_layer_costs: Dict[BuildingLayer, float] = Field(default_factory=dict)
    total_project_cost: float = 0.0
    submission_date: date


class ComplianceResult(FrozenModel):
    """Outcome of one (building layer, credit type) evaluation"""
    building_layer: BuildingLayer
    credit_type: CreditType
    percentage: float = Field(..., ge=0.0, le=1.0)
    threshold: float
    achieved: bool
    achievement_level: AchievementLevel = AchievementLevel.NONE
    points_awarded: float
    compliant_cost: float
    total_cost: float
    compliant_product_ids: List[str] = Field(default_factory=list)
    non_compliant_product_ids: List[str] = Field(default_factory=list)

    @property
    def shortfall(self) -> float:
        return max(0.0, self.threshold - self.percentage)


class CalculationSummary(FrozenModel):
    project_id: str
    overall_score: float = Field(..., ge=0.0, le=1.0)
    achievement_level: AchievementLevel
    achieved_credits: int
    total_possible_credits: int
    total_compliance: List[ComplianceResult]
    recommendations: List[str]
    calculation_date: date
    calculator_version: str
    warnings: List[str] = Field(default_factory=list)


class InitiativeSearchCriteria(BaseModel):
    """Filters for browsing the initiative catalog"""
    name: Optional[str] = None
    category: Optional[CategoryType] = None
    minimum_rpv: Optional[float] = None
    is_active: Optional[bool] = None
    recognition_date_from: Optional[date] = None
    recognition_date_to: Optional[date] = None


class GreenStarStructure(BaseModel):
    """Structure information for the Responsible Products calculator"""
    building_layers: List[str]
    layer_info: Dict[str, Dict[str, Any]]
    credit_types: List[str]
    credit_categories: Dict[str, str]
    achievement_levels: List[str]
    achievement_cut_points: Dict[str, float]


# Constants and configuration
LAYER_WEIGHTS: Dict[BuildingLayer, float] = {
    BuildingLayer.STRUCTURE: 0.4,
    BuildingLayer.ENVELOPE: 0.3,
    BuildingLayer.SYSTEMS: 0.2,
    BuildingLayer.FINISHES: 0.1,
}

BUILDING_LAYER_INFO: Dict[BuildingLayer, Dict[str, Any]] = {
    BuildingLayer.STRUCTURE: {
        "label": "Structure",
        "description": "Structural elements including foundations, frames, and load-bearing components",
        "typical_materials": ["Steel", "Concrete", "Timber", "Masonry"],
        "weight": LAYER_WEIGHTS[BuildingLayer.STRUCTURE],
    },
    BuildingLayer.ENVELOPE: {
        "label": "Envelope",
        "description": "Building envelope including walls, roofing, and exterior elements",
        "typical_materials": ["Insulation", "Cladding", "Windows", "Roofing"],
        "weight": LAYER_WEIGHTS[BuildingLayer.ENVELOPE],
    },
    BuildingLayer.SYSTEMS: {
        "label": "Systems",
        "description": "Building systems including HVAC, electrical, and plumbing",
        "typical_materials": ["HVAC Equipment", "Electrical Systems", "Plumbing", "Fire Systems"],
        "weight": LAYER_WEIGHTS[BuildingLayer.SYSTEMS],
    },
    BuildingLayer.FINISHES: {
        "label": "Finishes",
        "description": "Interior and exterior finishes and fixtures",
        "typical_materials": ["Flooring", "Wall Finishes", "Fixtures", "Furniture"],
        "weight": LAYER_WEIGHTS[BuildingLayer.FINISHES],
    },
}

CREDIT_CATEGORIES: Dict[CreditType, CategoryType] = {
    CreditType.CORPORATE_COMMITMENT_CLIMATE: CategoryType.RESPONSIBLE,
    CreditType.ENVIRONMENTAL_MANAGEMENT: CategoryType.RESPONSIBLE,
    CreditType.CARBON_EMISSIONS_DISCLOSURE: CategoryType.RESPONSIBLE,
    CreditType.SOCIALLY_RESPONSIBLE_EXTRACTION: CategoryType.RESPONSIBLE,
    CreditType.TRANSPARENT_CHAIN_CUSTODY: CategoryType.RESPONSIBLE,
    CreditType.ENVIRONMENTAL_IMPACT_DISCLOSURE: CategoryType.RESPONSIBLE,
    CreditType.OCCUPANT_HEALTH_SAFETY: CategoryType.HEALTHY,
    CreditType.MANUFACTURING_HEALTH_SAFETY: CategoryType.HEALTHY,
    CreditType.CHEMICALS_OF_CONCERN: CategoryType.HEALTHY,
    CreditType.HEALTH_IMPACTS_DISCLOSURE: CategoryType.HEALTHY,
    CreditType.INGREDIENT_DISCLOSURE: CategoryType.HEALTHY,
    CreditType.ENERGY_USE_REDUCTION: CategoryType.POSITIVE,
    CreditType.ENERGY_SOURCE: CategoryType.POSITIVE,
    CreditType.IMPACTS_TO_NATURE: CategoryType.POSITIVE,
    CreditType.MATERIAL_EXTRACTION_IMPACT_REDUCTION: CategoryType.CIRCULAR,
    CreditType.CARBON_EMISSIONS_REDUCTION: CategoryType.CIRCULAR,
    CreditType.WATER_USE_REDUCTION: CategoryType.CIRCULAR,
    CreditType.WASTE_GENERATION_REDUCTION: CategoryType.CIRCULAR,
    CreditType.PACKAGING: CategoryType.CIRCULAR,
    CreditType.LEADERSHIP: CategoryType.LEADERSHIP,
}
