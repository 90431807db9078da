import logging
from typing import Optional
from sqlalchemy.orm import Session

from database import SessionLocal
from crud import ledger as ledger_crud
from crud import cod_tracking as cod_crud
from utils.clock import local_now

logger = logging.getLogger(__name__)

def run_eod_tasks(db: Optional[Session] = None) -> dict:
    """
    End-of-day checks on the books.

    Logs unbalanced ledger transactions (ERROR), the outstanding COD total and
    collections whose variance has not been reconciled yet (WARNING). Opens its
    own session when none is given, which is how the scheduler calls it.

    Returns:
        A summary dict of what was found, mostly for tests and manual runs.
    """
    owns_session = db is None
    if owns_session:
        db = SessionLocal()
    logger.info(f"Starting end-of-day tasks for {local_now():%Y-%m-%d}")
    try:
        trial_balance = ledger_crud.get_trial_balance(db)
        unbalanced = trial_balance["unbalanced_transactions"]
        if unbalanced:
            logger.error(f"Unbalanced ledger transactions: {', '.join(unbalanced)}")
        if trial_balance["total_debits"] != trial_balance["total_credits"]:
            logger.error(
                f"Trial balance out: debits {trial_balance['total_debits']} "
                f"credits {trial_balance['total_credits']}"
            )

        outstanding = ledger_crud.get_outstanding_cod(db)
        logger.info(f"Outstanding COD: {outstanding['total']} across {outstanding['count']} orders")

        variances = cod_crud.get_unreconciled_variances(db)
        for tracking in variances:
            logger.warning(
                f"Unreconciled COD variance on order {tracking.order_id}: "
                f"due {tracking.amount_due}, collected {tracking.amount_collected}, variance {tracking.variance}"
            )

        logger.info("End-of-day tasks finished.")
        return {
            "unbalanced_transactions": unbalanced,
            "outstanding_cod": outstanding,
            "unreconciled_variances": [t.order_id for t in variances],
        }
    except Exception as e:
        logger.error(f"Error during end-of-day tasks: {e}", exc_info=True)
        raise
    finally:
        if owns_session:
            db.close()
