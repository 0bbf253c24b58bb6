from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Optional, List

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from shared.logging_config import setup_logging
from shared.health import create_health_response
from shared.http_errors import create_http_exception
from shared.models.exceptions import GreenStarException
from .catalog import SAMPLE_CATALOG
from .models import (
    AchievementLevel, BuildingLayer, CalculationSummary, CategoryType, CreditThreshold,
    CreditType, GreenStarStructure, Initiative, InitiativeSearchCriteria, ProjectData,
    BUILDING_LAYER_INFO, CREDIT_CATEGORIES
)
from .score import ResponsibleProductsCalculator
from .thresholds import DEFAULT_THRESHOLD_TABLE
from .utils import export_to_csv
from .config import settings

# Setup logging
logger = setup_logging(settings.service_name, settings.log_level, settings.log_format)

# Global instances
calculator = ResponsibleProductsCalculator(
    thresholds=DEFAULT_THRESHOLD_TABLE,
    catalog=SAMPLE_CATALOG,
    settings=settings,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Green Star Responsible Products Service...")
    # Fail fast if the default table cannot cover every layer
    DEFAULT_THRESHOLD_TABLE.validate_complete(list(BuildingLayer))
    logger.info(
        f"Loaded {len(DEFAULT_THRESHOLD_TABLE)} credit thresholds and {len(SAMPLE_CATALOG)} initiatives"
    )
    yield
    logger.info("Green Star Responsible Products Service shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Green Star Responsible Products Service",
    description="Calculates Green Star Responsible Products credit compliance for construction projects",
    version=settings.version,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.exception_handler(GreenStarException)
async def greenstar_exception_handler(request: Request, exc: GreenStarException):
    """Handle domain exceptions"""
    http_exc = create_http_exception(exc)
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"detail": http_exc.detail, "type": type(exc).__name__}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    additional_checks = {
        "thresholds_loaded": len(calculator.thresholds) > 0,
        "catalog_loaded": len(calculator.catalog) > 0,
    }
    return create_health_response(settings.service_name, settings.version, additional_checks)


@app.get("/structure", response_model=GreenStarStructure)
async def get_calculator_structure():
    """Get building layers, credit types and achievement scales"""
    return GreenStarStructure(
        building_layers=[layer.value for layer in BuildingLayer],
        layer_info={layer.value: info for layer, info in BUILDING_LAYER_INFO.items()},
        credit_types=[credit.value for credit in calculator.thresholds.credit_types],
        credit_categories={credit.value: category.value for credit, category in CREDIT_CATEGORIES.items()},
        achievement_levels=[level.value for level in AchievementLevel],
        achievement_cut_points=settings.achievement_cut_points,
    )


@app.get("/thresholds", response_model=List[CreditThreshold])
async def get_thresholds():
    """Get the registered credit thresholds"""
    return list(calculator.thresholds)


@app.get("/initiatives", response_model=List[Initiative])
async def get_initiatives(
    name: Optional[str] = None,
    category: Optional[CategoryType] = None,
    minimum_rpv: Optional[float] = Query(None, ge=0),
    is_active: Optional[bool] = None,
    recognition_date_from: Optional[date] = None,
    recognition_date_to: Optional[date] = None,
):
    """Search the initiative catalog"""
    criteria = InitiativeSearchCriteria(
        name=name,
        category=category,
        minimum_rpv=minimum_rpv,
        is_active=is_active,
        recognition_date_from=recognition_date_from,
        recognition_date_to=recognition_date_to,
    )
    return calculator.catalog.search(criteria)


@app.get("/template")
async def get_project_template():
    """Get a template for a compliance calculation request"""
    template = {
        "project_id": "PRJ-001",
        "project_name": "Sample Commercial Office",
        "submission_date": "2025-06-30",
        "total_project_cost": 300000,
        "building_layer_costs": {
            BuildingLayer.STRUCTURE.value: 210000,
            BuildingLayer.SYSTEMS.value: 90000,
        },
        "products": [
            {
                "product_id": "STR-001",
                "product_name": "Sustainable Steel Beams",
                "manufacturer": "GreenSteel Industries",
                "description": "High-strength steel beams made from 90% recycled content",
                "building_layers": [BuildingLayer.STRUCTURE.value],
                "cost": 125000,
                "quantity": 50,
                "unit": "tonnes",
                "category": "Structural Steel",
                "subcategory": "Beams",
                "certifications": [
                    {
                        "initiative_id": "GBCA-001",
                        "certificate_number": "GBCA-STR-2024-001",
                        "issue_date": "2024-01-20",
                        "expiry_date": "2027-01-20",
                        "verification_status": "verified",
                        "rpv_snapshot": 85
                    }
                ]
            },
            {
                "product_id": "SYS-001",
                "product_name": "High Efficiency HVAC System",
                "manufacturer": "ClimateControl Technologies",
                "description": "Variable refrigerant flow system with heat recovery",
                "building_layers": [BuildingLayer.SYSTEMS.value],
                "cost": 90000,
                "quantity": 1,
                "unit": "system",
                "category": "HVAC",
                "certifications": []
            }
        ]
    }

    return {
        "template": template,
        "notes": [
            "building_layer_costs keys must be one of: " + ", ".join(layer.value for layer in BuildingLayer),
            "Only verified, unexpired certifications from active catalog initiatives count as compliant",
            "Percentages in the response are fractions between 0 and 1",
            "Layer percentages use the allocated layer cost as the denominator",
        ]
    }


@app.post("/calculate", response_model=CalculationSummary)
async def calculate(project: ProjectData, evaluation_date: Optional[date] = None):
    """Calculate Responsible Products compliance for a project"""
    return calculator.calculate_project_compliance(project, evaluation_date)


@app.post("/calculate/csv", response_class=PlainTextResponse)
async def calculate_csv(project: ProjectData, evaluation_date: Optional[date] = None):
    """Calculate compliance and return the breakdown as CSV"""
    summary = calculator.calculate_project_compliance(project, evaluation_date)
    return PlainTextResponse(
        export_to_csv(summary, settings.currency_code),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{project.project_id}-greenstar.csv"'},
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.service_name,
        "version": settings.version,
        "status": "running",
        "description": "Green Star Responsible Products compliance calculator",
        "credit_types": len(calculator.thresholds.credit_types),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        workers=settings.api_workers
    )
