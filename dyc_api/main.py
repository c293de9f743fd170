# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database

from dyc_api import __version__, config
from dyc_api.database.connection import close_client, ensure_indexes, get_db, ping
from dyc_api.errors import setup_exception_handlers
from dyc_api.routes.admin_routes import router as admin_router
from dyc_api.routes.dashboard_routes import router as dashboard_router
from dyc_api.routes.oauth_routes import router as oauth_router
from dyc_api.routes.politician_routes import router as politician_router
from dyc_api.routes.referido_routes import router as referido_router
from dyc_api.routes.statistics_routes import router as statistics_router
from dyc_api.storage import upload_dir
from dyc_api.utils import api_response, iso_timestamp

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting DYC API ({config.ENVIRONMENT})")
    try:
        ensure_indexes(get_db())
    except Exception as e:
        # The API still serves; /health reports the database state
        logger.error(f"Could not create indexes: {e}")
    yield
    close_client()


app = FastAPI(title="DYC - Referidos API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

for router in (
    oauth_router,
    politician_router,
    referido_router,
    dashboard_router,
    statistics_router,
    admin_router,
):
    app.include_router(router, prefix="/api")

app.mount("/uploads", StaticFiles(directory=upload_dir(), check_dir=False), name="uploads")


# --- General Endpoints ---

@app.get("/", tags=["Root"])
def read_root():
    return api_response(True, "DYC Referidos API", {
        "name": "DYC Referidos API",
        "version": __version__,
        "environment": config.ENVIRONMENT,
        "apiUrl": config.API_URL,
    })


@app.get("/health", tags=["Root"])
def health_check(db: Database = Depends(get_db)):
    healthy = ping(db)
    body = {
        "status": "OK" if healthy else "ERROR",
        "database": "connected" if healthy else "disconnected",
        "timestamp": iso_timestamp(),
    }
    return JSONResponse(status_code=200 if healthy else 500, content=body)


@app.get("/favicon.ico", include_in_schema=False)
def favicon():
    return Response(status_code=204)
