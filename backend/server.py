from fastapi import FastAPI, APIRouter, HTTPException, Query
from dotenv import load_dotenv
from starlette.middleware.cors import CORSMiddleware
import os
import logging
from pathlib import Path
from pydantic import BaseModel
from typing import Optional
from datetime import datetime, timezone

from conversion_errors import ConversionError
from conversion_service import ConversionRequest, ConversionResult, ConversionService
from crop_rate import crop_rate
from dilution import DilutedProductApplication
from unit_conversion_engine import ENGINE_VERSION, standard_label, unit_category_name, unit_from_label, value_from_to

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

SERVICE_NAME = os.environ.get('SERVICE_NAME', 'Unit Conversion API')
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title=SERVICE_NAME)

# ==================== CORS CONFIGURATION (MUST BE FIRST) ====================
# Default allowed origins for local development
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

cors_origins_env = os.environ.get('CORS_ORIGINS', '')
if cors_origins_env:
    cors_origins = [origin.strip() for origin in cors_origins_env.split(',') if origin.strip()]
else:
    cors_origins = DEFAULT_CORS_ORIGINS

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Origin"],
    max_age=600,  # Cache preflight for 10 minutes
)

# ==================== HEALTH ENDPOINT (ROOT LEVEL) ====================
@app.get("/api/health")
async def health_check():
    """Health check endpoint for monitoring and CORS verification"""
    return {
        "ok": True,
        "time": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": ENGINE_VERSION
    }

api_router = APIRouter(prefix="/api")

conversion_service = ConversionService()

# ==================== MODELS ====================

class ValueConversionInput(BaseModel):
    value: float
    from_unit: str
    to_unit: str

class CropYieldInput(BaseModel):
    crop: str
    value: float
    from_unit: str
    to_unit: str

class ConvertedValue(BaseModel):
    value: float
    unit: str
    crop: Optional[str] = None

class UnitLabel(BaseModel):
    label: str
    standard_label: str
    category: str

# ==================== CONVERSION ROUTES ====================

@api_router.post("/convert/value", response_model=ConvertedValue, response_model_exclude_none=True)
async def convert_value(data: ValueConversionInput):
    """Convert a value between simple or compound units"""
    logger.info(f"convert_value: {data.value} {data.from_unit} → {data.to_unit}")
    try:
        value = value_from_to(data.value, data.from_unit, data.to_unit)
    except ConversionError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    return ConvertedValue(value=value, unit=data.to_unit)

@api_router.post("/convert/crop-yield", response_model=ConvertedValue)
async def convert_crop_yield(data: CropYieldInput):
    """Convert a crop yield between mass and volume rates"""
    logger.info(f"convert_crop_yield: {data.crop} {data.value} {data.from_unit} → {data.to_unit}")
    try:
        value = crop_rate(data.crop, data.value, data.from_unit, data.to_unit)
    except ConversionError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    return ConvertedValue(value=value, unit=data.to_unit, crop=data.crop)

@api_router.post("/convert", response_model=ConversionResult)
async def convert(data: ConversionRequest):
    """Convert with a full result: status, errors and audit trail"""
    logger.info(f"convert: {data.value} {data.from_unit} → {data.to_unit}")
    return await conversion_service.convert(data)

@api_router.get("/units/label", response_model=UnitLabel)
async def get_unit_label(label: str = Query(...)):
    """Resolve a unit label to its standard label and category"""
    logger.info(f"get_unit_label: {label}")
    try:
        unit = unit_from_label(label)
    except ConversionError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    return UnitLabel(label=label, standard_label=standard_label(label), category=unit_category_name(unit))

# ==================== DILUTION ROUTES ====================

@api_router.post("/dilution/rate", response_model=ConvertedValue, response_model_exclude_none=True)
async def dilution_rate(data: DilutedProductApplication):
    """Application rate of a product diluted in a carrier"""
    logger.info(f"dilution_rate: {data.product_amount} {data.product_unit_label} per "
                f"{data.carrier_solvent_amount} {data.carrier_solvent_unit_label}")
    try:
        value, unit = data.application_rate()
    except ConversionError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    return ConvertedValue(value=value, unit=unit)


app.include_router(api_router)


@app.on_event("startup")
async def startup_event():
    logger.info(f"{SERVICE_NAME} {ENGINE_VERSION} started, CORS origins: {cors_origins}")
