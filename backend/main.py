from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from dotenv import load_dotenv

load_dotenv()
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette import status
from database import Base, engine, SessionLocal
from datetime import datetime
import os
import logging
from fastapi.openapi.utils import get_openapi

import models  # noqa: F401  registers every table on Base.metadata
import auth
import routers.addresses as addresses
import routers.admin as admin
import routers.cart as cart
import routers.categories as categories
import routers.chart_of_accounts as chart_of_accounts
import routers.checkout as checkout
import routers.cms as cms
import routers.customer as customer
import routers.finance as finance
import routers.orders as orders
import routers.products as products
import routers.settings as settings
from crud import chart_of_accounts as coa_crud
from crud import settings as settings_crud
from crud.ledger import AccountResolver
from crud.settings import SettingsCache, DEFAULT_CACHE_TTL_SECONDS


LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# One log file per start
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE,
    filemode='a'
)

# Also log to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler)

logger = logging.getLogger(__name__)
logger.info("Application starting up...")
# --- End Logging Configuration ---


# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        created_accounts = coa_crud.initialize_chart_of_accounts(db)
        created_settings = settings_crud.initialize_default_settings(db)
        logger.info(f"Startup seed: {created_accounts} accounts, {created_settings} settings created")
        app.state.account_resolver = AccountResolver()
        app.state.account_resolver.load(db)
    finally:
        db.close()

    ttl = float(os.getenv("SETTINGS_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS))
    app.state.settings_cache = SettingsCache(ttl_seconds=ttl)

    scheduler = None
    if os.getenv("ENABLE_SCHEDULER", "false").lower() == "true":
        from scheduler import scheduler
        scheduler.start()
        logger.info("End-of-day scheduler started")

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(lifespan=lifespan)


allowed_origins_str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000"
)

# Split the string into a list, stripping any whitespace
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(',')]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Validation failed for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "Validation failed", "details": exc.errors()}),
    )


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Bakery API",
        version="1.0.0",
        description="API for the bakery storefront, back-office and ledger",
        routes=app.routes,
    )
    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    openapi_schema["security"] = [{"BearerAuth": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(products.router)
app.include_router(addresses.router)
app.include_router(cart.router)
app.include_router(checkout.router)
app.include_router(orders.router)
app.include_router(customer.router)
app.include_router(admin.router)
app.include_router(settings.router)
app.include_router(cms.router)
app.include_router(finance.router)
app.include_router(chart_of_accounts.router)

@app.get("/")
async def test_route():
    return {"message": "Welcome to the Bakery API!"}
