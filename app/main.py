from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from app.logging_setup import ensure_logging
from app.routes.bootstrap import router as bootstrap_router
from app.services.secrets_service import SecretsConfigurationError, SecretsServiceError
from app.services.setup.sql import BootstrapError


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_logging()
    yield


app = FastAPI(lifespan=lifespan)

app.include_router(bootstrap_router)


@app.exception_handler(SecretsConfigurationError)
@app.exception_handler(BootstrapError)
async def bootstrap_config_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Configuration problems (bad secrets, invalid names) abort the run."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


@app.exception_handler(SecretsServiceError)
async def secrets_service_error_handler(request: Request, exc: SecretsServiceError) -> JSONResponse:
    """Secrets Manager could not be reached or refused the read: 502 with {"detail": ...}."""
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc)},
    )


@app.get("/")
async def root():
    return {"message": "Database bootstrap service is running."}
