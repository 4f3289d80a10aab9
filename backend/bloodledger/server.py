import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, settings as default_settings
from .database import load_state, save_state
from .routers import donors_router, donations_router, requests_router, inventory_router
from .services import BloodLedger, LedgerError, ValidationError

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(ledger: Optional[BloodLedger] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        if app.state.ledger is None:
            state = load_state(settings.ledger_state_file) if settings.ledger_state_file else None
            app.state.ledger = BloodLedger(settings=settings, state=state)
        yield
        if settings.ledger_state_file:
            save_state(app.state.ledger.export_state(), settings.ledger_state_file)

    app = FastAPI(
        title="Blood Ledger API",
        description="Blood unit ledger and allocation engine",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.ledger = ledger

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        detail = {"detail": exc.message, "error": type(exc).__name__}
        if isinstance(exc, ValidationError):
            detail["rule"] = exc.rule
        return JSONResponse(status_code=exc.status_code, content=detail)

    @app.get("/")
    async def root():
        return {"status": "healthy", "service": "Blood Ledger API"}

    app.include_router(donors_router)
    app.include_router(donations_router)
    app.include_router(requests_router)
    app.include_router(inventory_router)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("bloodledger.server:app", host="0.0.0.0", port=8000, reload=True)
