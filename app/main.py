import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.mongo import connect_to_mongo, disconnect_from_mongo, get_db
from app.api.v1.api import api_router
from app.repositories.ledger_repo import IncomingRepository, OutgoingRepository, RecordStoreError
from app.services.ledger_service import LedgerService

setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to MongoDB and load both ledgers once per process."""
    try:
        await connect_to_mongo()
    except PyMongoError as exc:
        # The client is still usable once the server comes back
        logger.error("MongoDB index setup failed: %s", exc)

    db = get_db()
    ledger = LedgerService(IncomingRepository(db), OutgoingRepository(db))
    app.state.ledger_service = ledger
    try:
        await ledger.refresh()
    except RecordStoreError:
        logger.warning("Initial ledger load failed; will retry on first request")

    yield

    await disconnect_from_mongo()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RecordStoreError)
async def record_store_error_handler(request: Request, exc: RecordStoreError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Record store unavailable, please try again"}
    )


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}


@app.get("/health")
async def health(request: Request):
    ledger = getattr(request.app.state, "ledger_service", None)
    return {
        "status": "ok",
        "ledgers_loaded": bool(ledger and ledger.loaded),
    }

app.include_router(api_router, prefix=settings.API_V1_STR)
