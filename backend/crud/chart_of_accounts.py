from sqlalchemy.orm import Session
from typing import Optional
import logging

from models import chart_of_accounts as chart_of_accounts_model
from models.chart_of_accounts import AccountCode, AccountType, AccountCategory
from models.ledger_entries import LedgerEntry
from models.financial_adjustments import FinancialAdjustment, AdjustmentStatus
from schemas.chart_of_accounts import ChartOfAccountsCreate, ChartOfAccountsUpdate

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS = [
    # Assets
    (AccountCode.CASH, "Cash", AccountType.ASSET, AccountCategory.CASH, "Cash on hand and in bank"),
    (AccountCode.ACCOUNTS_RECEIVABLE, "Accounts Receivable", AccountType.ASSET, AccountCategory.ACCOUNTS_RECEIVABLE, "Money owed by customers"),
    (AccountCode.COD_RECEIVABLE, "COD Receivable", AccountType.ASSET, AccountCategory.ACCOUNTS_RECEIVABLE, "Cash on delivery amounts to be collected"),
    (AccountCode.INVENTORY_RAW_MATERIALS, "Inventory - Raw Materials", AccountType.ASSET, AccountCategory.INVENTORY, "Flour, sugar, eggs and other ingredients"),
    (AccountCode.INVENTORY_FINISHED_GOODS, "Inventory - Finished Goods", AccountType.ASSET, AccountCategory.INVENTORY, "Baked goods ready for sale"),
    (AccountCode.PREPAID_EXPENSES, "Prepaid Expenses", AccountType.ASSET, AccountCategory.PREPAID_EXPENSES, "Expenses paid in advance"),
    (AccountCode.EQUIPMENT, "Equipment", AccountType.ASSET, AccountCategory.FIXED_ASSETS, "Ovens, mixers and other equipment"),
    # Liabilities
    (AccountCode.ACCOUNTS_PAYABLE, "Accounts Payable", AccountType.LIABILITY, AccountCategory.ACCOUNTS_PAYABLE, "Money owed to suppliers"),
    (AccountCode.COD_OUTSTANDING, "COD Outstanding", AccountType.LIABILITY, AccountCategory.COD_OUTSTANDING, "COD amounts collected but not yet deposited"),
    (AccountCode.ACCRUED_EXPENSES, "Accrued Expenses", AccountType.LIABILITY, AccountCategory.ACCRUED_EXPENSES, "Expenses incurred but not yet paid"),
    # Equity
    (AccountCode.OWNERS_EQUITY, "Owner's Equity", AccountType.EQUITY, AccountCategory.OWNERS_EQUITY, "Owner's investment in the business"),
    (AccountCode.RETAINED_EARNINGS, "Retained Earnings", AccountType.EQUITY, AccountCategory.RETAINED_EARNINGS, "Accumulated profits"),
    # Revenue
    (AccountCode.PRODUCT_SALES, "Product Sales", AccountType.REVENUE, AccountCategory.PRODUCT_SALES, "Revenue from bakery product sales"),
    (AccountCode.DELIVERY_FEE_REVENUE, "Delivery Fee Revenue", AccountType.REVENUE, AccountCategory.DELIVERY_FEES, "Revenue from delivery fees"),
    (AccountCode.SERVICE_REVENUE, "Service Revenue", AccountType.REVENUE, AccountCategory.SERVICE_REVENUE, "Revenue from catering and special orders"),
    # Expenses
    (AccountCode.COST_OF_GOODS_SOLD, "Cost of Goods Sold", AccountType.EXPENSE, AccountCategory.COST_OF_GOODS_SOLD, "Direct cost of products sold"),
    (AccountCode.DELIVERY_EXPENSES, "Delivery Expenses", AccountType.EXPENSE, AccountCategory.DELIVERY_EXPENSES, "Costs related to delivery"),
    (AccountCode.OPERATING_EXPENSES, "Operating Expenses", AccountType.EXPENSE, AccountCategory.OPERATING_EXPENSES, "General operating costs"),
    (AccountCode.ADMINISTRATIVE_EXPENSES, "Administrative Expenses", AccountType.EXPENSE, AccountCategory.ADMINISTRATIVE_EXPENSES, "Administrative and office costs"),
]


def get_account_by_code(db: Session, code: str):
    return db.query(chart_of_accounts_model.ChartOfAccounts).filter(
        chart_of_accounts_model.ChartOfAccounts.code == code
    ).first()


def get_account(db: Session, account_id: int):
    return db.query(chart_of_accounts_model.ChartOfAccounts).filter(
        chart_of_accounts_model.ChartOfAccounts.id == account_id
    ).first()


def get_accounts(db: Session, account_type: Optional[AccountType] = None, include_inactive: bool = False,
                 skip: int = 0, limit: int = 100):
    query = db.query(chart_of_accounts_model.ChartOfAccounts)
    if not include_inactive:
        query = query.filter(chart_of_accounts_model.ChartOfAccounts.is_active == True)
    if account_type:
        query = query.filter(chart_of_accounts_model.ChartOfAccounts.type == account_type)
    return query.order_by(chart_of_accounts_model.ChartOfAccounts.code).offset(skip).limit(limit).all()


def account_has_entries(db: Session, account_id: int) -> bool:
    return db.query(LedgerEntry.id).filter(LedgerEntry.account_id == account_id).first() is not None


def has_pending_adjustments(db: Session, code: str) -> bool:
    return db.query(FinancialAdjustment.id).filter(
        FinancialAdjustment.status == AdjustmentStatus.PENDING,
        (FinancialAdjustment.debit_account_code == code) | (FinancialAdjustment.credit_account_code == code),
    ).first() is not None


def create_account(db: Session, account: ChartOfAccountsCreate, created_by: Optional[str] = None):
    if get_account_by_code(db, account.code):
        raise ValueError(f"Account code {account.code} already exists")
    db_account = chart_of_accounts_model.ChartOfAccounts(**account.model_dump(), created_by=created_by)
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    return db_account


def update_account(db: Session, code: str, account_update: ChartOfAccountsUpdate, updated_by: Optional[str] = None):
    """
    Update an account's descriptive fields.

    The type of an account that already carries entries can't change, since that
    would flip the sign of its historical balance. Deactivating such an account
    is refused for the same reason, and so is deactivating an account that a
    pending adjustment would post to.
    """
    db_account = get_account_by_code(db, code)
    if not db_account:
        return None

    update_data = account_update.model_dump(exclude_unset=True)
    if account_has_entries(db, db_account.id):
        if "type" in update_data and update_data["type"] != db_account.type:
            raise ValueError("Cannot change the type of an account that has ledger entries")
        if update_data.get("is_active") is False:
            raise ValueError("Cannot deactivate an account that has ledger entries")
    if update_data.get("is_active") is False and has_pending_adjustments(db, code):
        raise ValueError("Cannot deactivate an account referenced by a pending adjustment")

    for key, value in update_data.items():
        setattr(db_account, key, value)
    db_account.updated_by = updated_by

    db.commit()
    db.refresh(db_account)
    return db_account


def initialize_chart_of_accounts(db: Session) -> int:
    """
    Seed the bakery's chart of accounts. Existing codes are left untouched, so
    this is safe to run on every start-up.

    Returns:
        int: number of accounts created.
    """
    created = 0
    for code, name, account_type, category, description in DEFAULT_ACCOUNTS:
        if get_account_by_code(db, code.value):
            continue
        db.add(chart_of_accounts_model.ChartOfAccounts(
            code=code.value,
            name=name,
            type=account_type,
            category=category,
            description=description,
            is_active=True,
        ))
        created += 1
        logger.info(f"Created default account {code.value} - {name}")

    if created:
        db.commit()
    logger.info(f"Chart of accounts initialized ({created} new accounts)")
    return created
