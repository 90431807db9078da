from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
import enum
import logging
import math

from database import get_db
from models.users import User
from models.orders import Order
from models.financial_adjustments import AdjustmentType, AdjustmentStatus
from crud import ledger as ledger_crud
from crud import cod_tracking as cod_crud
from crud import financial_adjustments as adjustment_crud
from crud import financial_reports as report_crud
from crud import chart_of_accounts as coa_crud
from crud.ledger import AccountResolver
from schemas.cod import CODCollect, CODCollectResponse, CODReconcile, CODSummary, CODTracking
from schemas.financial_adjustments import (
    FinancialAdjustmentCreate, FinancialAdjustmentList, FinancialAdjustmentResponse,
)
from schemas.financial_reports import SummaryReport, DetailedReport, CODAnalysisReport
from schemas.ledger import AccountBalance, TrialBalance
from schemas.chart_of_accounts import InitAccountsRequest
from utils.auth_utils import require_finance_admin, get_user_identifier
from utils.dependencies import get_account_resolver
from utils.clock import local_now, to_local

router = APIRouter(prefix="/finance", tags=["Finance"])
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ReportType(str, enum.Enum):
    SUMMARY = "summary"
    DETAILED = "detailed"
    COD_ANALYSIS = "cod-analysis"


class ReportFormat(str, enum.Enum):
    JSON = "json"
    XLSX = "xlsx"


# --- COD -----------------------------------------------------------------------

@router.post("/cod", response_model=CODCollectResponse)
def collect_cod(
    payload: CODCollect,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
    resolver: AccountResolver = Depends(get_account_resolver),
):
    """Record the cash collected for a delivered cash-on-delivery order."""
    order = db.query(Order).filter(Order.id == payload.order_id).first()
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    try:
        cod_crud.collect_cod(db, order, payload.amount_collected, get_user_identifier(user),
                             notes=payload.notes, resolver=resolver)
    except ValueError as e:
        logger.warning(f"COD collection for order {payload.order_id} refused: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error collecting COD for order {payload.order_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to collect COD")

    tracking = cod_crud.get_cod_tracking(db, payload.order_id)
    return {
        "success": True,
        "message": "COD collected successfully",
        "cod_tracking": cod_crud.tracking_to_dict(tracking),
    }


@router.get("/cod")
def get_cod_status(
    order_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    """One order's COD tracking when order_id is given, otherwise the outstanding summary."""
    if order_id is not None:
        tracking = cod_crud.get_cod_tracking(db, order_id)
        if not tracking:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="COD tracking not found for this order")
        return {"cod_tracking": CODTracking.model_validate(cod_crud.tracking_to_dict(tracking))}

    return CODSummary(
        outstanding=ledger_crud.get_outstanding_cod(db),
        recent_collections=[cod_crud.tracking_to_dict(t) for t in cod_crud.get_recent_collections(db)],
    )


@router.post("/cod/{order_id}/reconcile", response_model=CODTracking)
def reconcile_cod(
    order_id: int,
    payload: CODReconcile,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    try:
        tracking = cod_crud.reconcile_cod(db, order_id, get_user_identifier(user), payload.variance_reason)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if tracking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="COD tracking not found for this order")
    return cod_crud.tracking_to_dict(tracking)


# --- Adjustments ---------------------------------------------------------------

@router.post("/adjustments", response_model=FinancialAdjustmentResponse, status_code=status.HTTP_201_CREATED)
def create_adjustment(
    payload: FinancialAdjustmentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    try:
        adjustment = adjustment_crud.create_adjustment(db, payload, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"success": True, "message": "Financial adjustment created and awaiting approval", "adjustment": adjustment}


@router.post("/adjustments/{adjustment_id}/approve", response_model=FinancialAdjustmentResponse)
def approve_adjustment(
    adjustment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
    resolver: AccountResolver = Depends(get_account_resolver),
):
    try:
        adjustment = adjustment_crud.approve_adjustment(db, adjustment_id, get_user_identifier(user), resolver)
    except ValueError as e:
        logger.warning(f"Approval of adjustment {adjustment_id} refused: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error approving adjustment {adjustment_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to approve adjustment")
    if adjustment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Adjustment not found")
    return {"success": True, "message": "Financial adjustment approved and posted", "adjustment": adjustment}


@router.post("/adjustments/{adjustment_id}/reject", response_model=FinancialAdjustmentResponse)
def reject_adjustment(
    adjustment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    try:
        adjustment = adjustment_crud.reject_adjustment(db, adjustment_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if adjustment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Adjustment not found")
    return {"success": True, "message": "Financial adjustment rejected", "adjustment": adjustment}


@router.get("/adjustments", response_model=FinancialAdjustmentList)
def list_adjustments(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    adjustment_type: Optional[AdjustmentType] = Query(None, alias="type"),
    adjustment_status: Optional[AdjustmentStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    adjustments, total = adjustment_crud.get_adjustments(
        db, adjustment_type=adjustment_type, status=adjustment_status, skip=(page - 1) * limit, limit=limit
    )
    return {
        "adjustments": adjustments,
        "pagination": {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)},
    }


# --- Reports -------------------------------------------------------------------

def _report_window(date_from: Optional[datetime], date_to: Optional[datetime]):
    now = local_now()
    start = to_local(date_from) if date_from else now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    end = to_local(date_to) if date_to else now
    if start > end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date_from cannot be after date_to")
    return start, end


@router.get("/reports")
def get_financial_report(
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    report_type: ReportType = Query(ReportType.SUMMARY, alias="type"),
    report_format: ReportFormat = Query(ReportFormat.JSON, alias="format"),
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    """
    Financial reports over [date_from, date_to].

    Dates default to the first day of the current month and now. The detailed
    report can also be downloaded as a spreadsheet with format=xlsx.
    """
    start, end = _report_window(date_from, date_to)
    logger.info(f"{report_type.value} report {start:%Y-%m-%d} - {end:%Y-%m-%d} requested by {get_user_identifier(user)}")

    try:
        if report_type == ReportType.SUMMARY:
            return SummaryReport.model_validate(report_crud.summary_report(db, start, end))

        if report_type == ReportType.DETAILED:
            if report_format == ReportFormat.XLSX:
                entries = report_crud.ledger_entries_in_period(db, start, end)
                excel_file = report_crud.ledger_workbook(entries, start, end)
                filename = f"ledger_{start:%Y%m%d}_{end:%Y%m%d}.xlsx"
                headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
                return StreamingResponse(excel_file, media_type=XLSX_MEDIA_TYPE, headers=headers)
            return DetailedReport.model_validate(report_crud.detailed_report(db, start, end))

        return CODAnalysisReport.model_validate(report_crud.cod_analysis_report(db, start, end))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error generating financial report")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate financial report")


@router.get("/accounts/{code}/balance", response_model=AccountBalance)
def get_account_balance(
    code: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    account = coa_crud.get_account_by_code(db, code)
    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Account {code} not found")
    return {
        "code": account.code,
        "name": account.name,
        "type": account.type,
        "balance": ledger_crud.get_account_balance(db, code),
    }


@router.get("/trial-balance", response_model=TrialBalance)
def get_trial_balance(
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    return ledger_crud.get_trial_balance(db)


@router.post("/init-accounts")
def init_accounts(
    payload: Optional[InitAccountsRequest] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
    resolver: AccountResolver = Depends(get_account_resolver),
):
    """Seed the chart of accounts. Safe to call repeatedly; existing accounts are kept."""
    try:
        created = coa_crud.initialize_chart_of_accounts(db)
    except Exception:
        logger.exception("Error initializing chart of accounts")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to initialize chart of accounts")
    resolver.invalidate()
    logger.info(f"Chart of accounts initialized by {get_user_identifier(user)}")
    return {"success": True, "message": "Chart of accounts initialized successfully", "created": created}
