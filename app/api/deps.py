from fastapi import Request

from app.services.ledger_service import LedgerService


def get_ledger_service(request: Request) -> LedgerService:
    """Return the ledger snapshot created at application startup."""
    return request.app.state.ledger_service
