"""
FastAPI main application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mwisim import __version__
from mwisim.errors import ConfigurationError, DataUnavailable, SimulationFault, SimulatorError
from mwisim.logging_config import setup_logging

from .config import settings
from .dependencies import get_simulation_service
from .routes import data, optimizer, simulation
from .schemas.common import ErrorResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)
    yield
    get_simulation_service().shutdown()
    get_simulation_service.cache_clear()


app = FastAPI(
    title="MWI Combat Simulator API",
    description="Party combat simulation, drop and profit estimation",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(simulation.router, prefix="/api/simulation", tags=["Simulation"])
app.include_router(optimizer.router, prefix="/api/optimizer", tags=["Optimizer"])
app.include_router(data.router, prefix="/api/data", tags=["Data"])


def _error(status_code: int, exc: SimulatorError) -> JSONResponse:
    body = ErrorResponse(error=type(exc).__name__, detail=str(exc), tick=getattr(exc, "tick", None))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return _error(422, exc)


@app.exception_handler(DataUnavailable)
async def data_unavailable_handler(request: Request, exc: DataUnavailable):
    return _error(503, exc)


@app.exception_handler(SimulationFault)
async def simulation_fault_handler(request: Request, exc: SimulationFault):
    return _error(500, exc)


@app.get("/")
async def root():
    """API status check."""
    return {
        "status": "ok",
        "name": "MWI Combat Simulator API",
        "version": __version__,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
