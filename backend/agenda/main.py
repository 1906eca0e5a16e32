# backend/agenda/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings
from .core.errors import AgendaError, ConflictError, NotFoundError, ValidationError
from .database import Base, engine
from .models import appointment, client, organization, professional, schedule_exception, service  # noqa: F401
from .routers import appointments as appointments_router
from .routers import availability as availability_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Agenda arrancando...")
    # el esquema en producción lo gestionan las migraciones; en dev se crea aquí
    if settings.APP_ENV.lower() != "prod":
        Base.metadata.create_all(bind=engine, checkfirst=True)
    yield
    logger.info("Agenda detenida")


app = FastAPI(title="Agenda - Disponibilidad", docs_url=None, redoc_url=None, lifespan=lifespan)

# --- API Routers ---
app.include_router(availability_router.router)
app.include_router(appointments_router.router)


# --- Errores de dominio -> HTTP ---
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info(f"400 {request.url.path}: {exc.field} - {exc.message}")
    return JSONResponse(status_code=400, content={"detail": exc.message, "field": exc.field})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": exc.message, "errores": exc.errors})


@app.exception_handler(AgendaError)
async def agenda_error_handler(request: Request, exc: AgendaError):
    logger.error(f"Error no controlado en {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    loc = errors[0].get("loc", ()) if errors else ()
    field = str(loc[-1]) if loc else "request"
    logger.info(f"400 {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={"detail": f"{field}: {errors[0].get('msg', 'valor no válido')}" if errors else "Petición no válida",
                 "field": field},
    )


@app.get("/ping")
def ping():
    return {"ok": True}
