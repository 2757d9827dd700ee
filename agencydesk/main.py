from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agencydesk.api.endpoints import (
    auth,
    clients,
    dashboard,
    employees,
    exchange_rates,
    finance,
    goals,
    invoices,
    packages,
)
from agencydesk.core.config import settings
from agencydesk.core.exceptions import AgencyDeskError
from agencydesk.core.logging import capture_error, get_logger, init_sentry, setup_logging
from agencydesk.db.session import create_tables
from agencydesk.middleware.logging import AccessLoggingMiddleware

# Initialize logging and error tracking
setup_logging()
init_sentry()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started in {settings.MODE} mode")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
## Authentication

Use `POST /api/auth/login` with `{"email": "...", "password": "..."}`. The
token is returned in the body and set as the `access_token` cookie; send it
back either as the cookie or as `Authorization: Bearer <token>`.

In the Swagger UI, click **Authorize** and enter your **email** in the
`username` field.

## Currencies

Dashboard endpoints accept an optional `currency` query parameter
(TRY, USD, EUR, SAR, AED, EGP). Without it, the user's saved display
currency is used.
    """,
    version=settings.VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    AccessLoggingMiddleware,
    enabled=settings.ACCESS_LOG_ENABLED,
    slow_request_seconds=settings.SLOW_REQUEST_SECONDS
)


@app.exception_handler(AgencyDeskError)
async def domain_error_handler(request: Request, exc: AgencyDeskError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    capture_error(
        exc,
        context={"request": {"method": request.method, "path": request.url.path}},
        tags={"request_id": getattr(request.state, "request_id", "unknown")}
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(clients.router, prefix="/api/clients", tags=["clients"])
app.include_router(invoices.router, prefix="/api/invoices", tags=["invoices"])
app.include_router(finance.router, prefix="/api/finance", tags=["finance"])
app.include_router(exchange_rates.router, prefix="/api/exchange-rates", tags=["exchange-rates"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(packages.router, prefix="/api/packages", tags=["packages"])
app.include_router(employees.router, prefix="/api/employees", tags=["employees"])
app.include_router(goals.router, prefix="/api/goals", tags=["goals"])


@app.get("/")
def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}. See /docs for the OpenAPI schema."}


@app.get("/health")
def health():
    return {"status": "ok"}
