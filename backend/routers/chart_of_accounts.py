from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models.users import User
from models.chart_of_accounts import AccountType
from schemas.chart_of_accounts import ChartOfAccounts, ChartOfAccountsCreate, ChartOfAccountsUpdate
from crud import chart_of_accounts as coa_crud
from crud.ledger import AccountResolver
from utils.auth_utils import require_finance_admin, get_user_identifier
from utils.dependencies import get_account_resolver

router = APIRouter(
    prefix="/chart-of-accounts",
    tags=["Chart of Accounts"],
)
logger = logging.getLogger(__name__)

@router.post("/", response_model=ChartOfAccounts, status_code=status.HTTP_201_CREATED)
def create_account(
    account: ChartOfAccountsCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
    resolver: AccountResolver = Depends(get_account_resolver),
):
    try:
        db_account = coa_crud.create_account(db, account, created_by=get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    resolver.invalidate()
    logger.info(f"Account {db_account.code} created by {get_user_identifier(user)}")
    return db_account

@router.get("/", response_model=List[ChartOfAccounts])
def get_accounts(
    account_type: Optional[AccountType] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    return coa_crud.get_accounts(db, account_type=account_type, include_inactive=include_inactive, limit=500)

@router.get("/{code}", response_model=ChartOfAccounts)
def get_account(
    code: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
):
    account = coa_crud.get_account_by_code(db, code)
    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Account with code {code} not found")
    return account

@router.patch("/{code}", response_model=ChartOfAccounts)
def update_account(
    code: str,
    account_update: ChartOfAccountsUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_finance_admin),
    resolver: AccountResolver = Depends(get_account_resolver),
):
    try:
        account = coa_crud.update_account(db, code, account_update, updated_by=get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Account with code {code} not found")
    resolver.invalidate()
    return account
