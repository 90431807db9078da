import sys
import os
import logging
from dotenv import load_dotenv

load_dotenv()

# Add the parent directory to sys.path to allow imports from backend
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base, SessionLocal, engine
import models  # noqa: F401
from crud.chart_of_accounts import initialize_chart_of_accounts
from crud.settings import initialize_default_settings

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger("init_chart_of_accounts")

def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        accounts = initialize_chart_of_accounts(db)
        settings = initialize_default_settings(db)
        logger.info(f"Created {accounts} accounts and {settings} default settings")
    except Exception as e:
        db.rollback()
        logger.error(f"Initialization failed: {e}", exc_info=True)
        raise
    finally:
        db.close()

if __name__ == "__main__":
    main()
