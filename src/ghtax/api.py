from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .calculator import PAYECalculator
from .config import Settings, get_settings
from .exceptions import UnsupportedTaxYear
from .logging import configure_logging, get_logger
from .models import CalculationError
from .schemas import (
    CalculationErrorOut,
    PAYERequestIn,
    TaxCalculationOut,
    TaxYearOut,
    VATCalculationOut,
    VATRequestIn,
)
from .tax_tables import RateTableRegistry
from .vat import calculate_vat_exclusive, calculate_vat_inclusive

logger = get_logger(__name__)

router = APIRouter()

ERROR_RESPONSES = {422: {"model": CalculationErrorOut}}


def get_calculator(request: Request) -> PAYECalculator:
    return request.app.state.calculator


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def error_response(error: CalculationError) -> JSONResponse:
    payload = CalculationErrorOut.model_validate(error).model_dump(by_alias=True)
    return JSONResponse(status_code=422, content=payload)


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/tax-years", response_model=list[TaxYearOut])
def list_tax_years(calculator: PAYECalculator = Depends(get_calculator)) -> list[TaxYearOut]:
    registry = calculator.registry
    return [TaxYearOut.model_validate(registry.lookup(year)) for year in registry.years()]


@router.post("/paye", response_model=TaxCalculationOut, responses=ERROR_RESPONSES)
def paye(
    payload: PAYERequestIn,
    calculator: PAYECalculator = Depends(get_calculator),
    settings: Settings = Depends(get_app_settings),
):
    request = payload.to_request(settings.default_tax_year)
    try:
        result = calculator.calculate_employee(request)
    except UnsupportedTaxYear as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(result, CalculationError):
        return error_response(result)
    return TaxCalculationOut.model_validate(result)


@router.post("/vat/exclusive", response_model=VATCalculationOut, responses=ERROR_RESPONSES)
def vat_exclusive(payload: VATRequestIn):
    result = calculate_vat_exclusive(payload.amount)
    if isinstance(result, CalculationError):
        return error_response(result)
    return VATCalculationOut.model_validate(result)


@router.post("/vat/inclusive", response_model=VATCalculationOut, responses=ERROR_RESPONSES)
def vat_inclusive(payload: VATRequestIn):
    result = calculate_vat_inclusive(payload.amount)
    if isinstance(result, CalculationError):
        return error_response(result)
    return VATCalculationOut.model_validate(result)


def create_app(settings: Settings | None = None, registry: RateTableRegistry | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    if registry is None:
        registry = RateTableRegistry.from_directory(settings.tax_tables_dir)

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.calculator = PAYECalculator(registry, settings.default_working_days)
    app.include_router(router)

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Ghana tax calculator running", "environment": settings.env}

    logger.info("startup_complete", env=settings.env, tax_years=registry.years())
    return app
