from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_ledger_service
from app.core.config import settings
from app.models.base import _today
from app.models.ledger import OutgoingRecord
from app.schemas.ledger import OutgoingCreate, OutgoingFilter, OutgoingLedgerResponse
from app.services.export import export_filename
from app.services.ledger_service import LedgerService, RecordNotFoundError
from app.utils.ledger_validation import LedgerValidationError

router = APIRouter()


@router.get("", response_model=OutgoingLedgerResponse)
async def list_outgoing(
    filters: Annotated[OutgoingFilter, Query()],
    ledger: LedgerService = Depends(get_ledger_service)
):
    """List outgoing records matching the filters, with their totals"""
    await ledger.ensure_loaded()
    records, totals = ledger.outgoing_view(filters)
    return OutgoingLedgerResponse(records=records, totals=totals)


@router.get("/export")
async def export_outgoing(
    filters: Annotated[OutgoingFilter, Query()],
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Download the filtered outgoing ledger as CSV"""
    await ledger.ensure_loaded()
    filename = export_filename(settings.OUTGOING_EXPORT_PREFIX, _today())
    return Response(
        content=ledger.export_outgoing(filters),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/{record_id}", response_model=OutgoingRecord)
async def get_outgoing(
    record_id: int,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Get a single outgoing record"""
    try:
        return await ledger.get_outgoing(record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Outgoing record not found")


@router.post("", response_model=OutgoingRecord, status_code=status.HTTP_201_CREATED)
async def create_outgoing(
    data: OutgoingCreate,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Create an outgoing record; a missing date defaults to today"""
    try:
        return await ledger.add_outgoing(data)
    except LedgerValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.put("/{record_id}", response_model=OutgoingRecord)
async def update_outgoing(
    record_id: int,
    data: OutgoingCreate,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Replace an outgoing record"""
    try:
        return await ledger.update_outgoing(record_id, data)
    except LedgerValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except RecordNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Outgoing record not found")


@router.delete("/{record_id}")
async def delete_outgoing(
    record_id: int,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Delete an outgoing record"""
    try:
        await ledger.delete_outgoing(record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Outgoing record not found")
    return {"success": True}
