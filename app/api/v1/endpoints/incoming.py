from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_ledger_service
from app.core.config import settings
from app.models.base import _today
from app.models.ledger import IncomingRecord
from app.schemas.ledger import IncomingCreate, IncomingFilter, IncomingLedgerResponse
from app.services.export import export_filename
from app.services.ledger_service import LedgerService, RecordNotFoundError
from app.utils.ledger_validation import LedgerValidationError

router = APIRouter()


@router.get("", response_model=IncomingLedgerResponse)
async def list_incoming(
    filters: Annotated[IncomingFilter, Query()],
    ledger: LedgerService = Depends(get_ledger_service)
):
    """List incoming records matching the filters, with their totals"""
    await ledger.ensure_loaded()
    records, totals = ledger.incoming_view(filters)
    return IncomingLedgerResponse(records=records, totals=totals)


@router.get("/export")
async def export_incoming(
    filters: Annotated[IncomingFilter, Query()],
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Download the filtered incoming ledger as CSV"""
    await ledger.ensure_loaded()
    filename = export_filename(settings.INCOMING_EXPORT_PREFIX, _today())
    return Response(
        content=ledger.export_incoming(filters),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/{record_id}", response_model=IncomingRecord)
async def get_incoming(
    record_id: int,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Get a single incoming record"""
    try:
        return await ledger.get_incoming(record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Incoming record not found")


@router.post("", response_model=IncomingRecord, status_code=status.HTTP_201_CREATED)
async def create_incoming(
    data: IncomingCreate,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Create an incoming record; totals and residuals are computed server side"""
    try:
        return await ledger.add_incoming(data)
    except LedgerValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.put("/{record_id}", response_model=IncomingRecord)
async def update_incoming(
    record_id: int,
    data: IncomingCreate,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Replace an incoming record"""
    try:
        return await ledger.update_incoming(record_id, data)
    except LedgerValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except RecordNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Incoming record not found")


@router.delete("/{record_id}")
async def delete_incoming(
    record_id: int,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Delete an incoming record"""
    try:
        await ledger.delete_incoming(record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Incoming record not found")
    return {"success": True}
