from fastapi import APIRouter
from quicksplit.api.v1.endpoints import groups, settlements

api_router = APIRouter()

api_router.include_router(settlements.router, prefix="/settlements", tags=["settlements"])
api_router.include_router(groups.router, prefix="/groups", tags=["groups"])
