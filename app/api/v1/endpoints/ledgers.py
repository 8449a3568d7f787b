from fastapi import APIRouter, Depends

from app.api.deps import get_ledger_service
from app.schemas.ledger import RefreshResponse
from app.services.ledger_service import LedgerService

router = APIRouter()


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_ledgers(ledger: LedgerService = Depends(get_ledger_service)):
    """Reload both ledgers from the record store"""
    await ledger.refresh()
    return RefreshResponse(incoming_count=len(ledger.incoming), outgoing_count=len(ledger.outgoing))
