from fastapi import APIRouter
from app.api.v1.endpoints import incoming, outgoing, ledgers

api_router = APIRouter()

api_router.include_router(incoming.router, prefix="/incoming", tags=["incoming"])
api_router.include_router(outgoing.router, prefix="/outgoing", tags=["outgoing"])
api_router.include_router(ledgers.router, prefix="/ledgers", tags=["ledgers"])
