from fastapi import APIRouter, Depends

# Core functions
from sfa_schemes.core.scheme_functions import calculate_schemes_core

# DTOs
from sfa_schemes.dto.api import CalculateRequest
from sfa_schemes.dto.calculation import CalculationResult

from sfa_schemes.routes.schemes.dependencies import get_scheme_engine
from sfa_schemes.schemes.engine import SchemeEngine

calculate_router = APIRouter(tags=["schemes-calculate"])


@calculate_router.post("/calculate", response_model=CalculationResult)
def calculate_schemes(request: CalculateRequest, engine: SchemeEngine = Depends(get_scheme_engine)):
    """ Stateless scheme calculation for a cart and customer """
    return calculate_schemes_core(request, engine)
