from fastapi import APIRouter

from .settlement import settlement_router

router = APIRouter()

router.include_router(settlement_router, tags=["Settlements"])
