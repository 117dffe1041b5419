from fastapi import APIRouter
from sfa_schemes.routes.schemes.calculate import calculate_router
from sfa_schemes.routes.schemes.sessions import sessions_router

schemes_router = APIRouter(tags=["schemes"])
schemes_router.include_router(calculate_router)
schemes_router.include_router(sessions_router)

__all__ = ["schemes_router"]
