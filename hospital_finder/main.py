# hospital_finder/main.py
from dotenv import load_dotenv

load_dotenv()

import logging
import logging.config
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.appconfig import Settings, settings as default_settings

# Apply logging configuration
logging.config.dictConfig(default_settings.LOGGING_CONFIG)

from hospital_finder.database.connection import connect_store
from hospital_finder.hospitals.hospital_routes import router as hospital_router
from hospital_finder.hospitals.hospital_store import HospitalStore, StoreOperationError
from hospital_finder.system_services.system_routes import router as system_router

logger = logging.getLogger(__name__)

AVAILABLE_ROUTES = [
    "GET /api/health",
    "GET /api/hospitals",
    "GET /api/hospitals/nearby?lat=XX&lng=XX&radius=XX",
    "GET /api/hospitals/search?state=XX&district=XX",
    "GET /api/hospitals/:id",
    "GET /api/hospitals/stats",
    "POST /api/hospitals/upload",
    "DELETE /api/hospitals/all",
]


# ===========================================
# ✅ Exception Handlers
# ===========================================
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)

    # Routing misses (unknown path or wrong method) get the route list
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": f"Route {request.method} {request.url.path} not found",
                "availableRoutes": AVAILABLE_ROUTES,
            },
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "message": str(exc.detail)},
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = error.get("loc", ())
        parameter = location[-1] if location else "request"
        problems.append(f"{parameter}: {error.get('msg')}")

    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request parameters", "message": "; ".join(problems)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Server error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "message": str(exc)},
    )


def create_app(settings: Optional[Settings] = None, store: Optional[HospitalStore] = None) -> FastAPI:
    """
    Build the API.

    When ``store`` is given the caller owns it: it is used as-is and not
    closed on shutdown. Otherwise a store is connected from ``settings``
    at startup.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        # Startup
        owns_store = app.state.store is None
        if owns_store:
            app.state.store = connect_store(settings)
            try:
                await app.state.store.ensure_indexes()
                logger.info("✅ MongoDB Connected Successfully")
            except StoreOperationError as e:
                # Keep serving; /api/health reports the database as disconnected
                logger.error(f"❌ MongoDB Connection Error: {e}")

        print("\n===============================================================================")
        print(f" 🏥 {settings.APP_NAME} v{settings.APP_VERSION}")
        print(f" ✅ Server running on port {settings.PORT}")
        print(f" 📡 API: http://localhost:{settings.PORT}/api")
        print(f" 🗄️  MongoDB: {settings.mongodb_location}")
        print("===============================================================================\n")
        yield
        # Shutdown
        if owns_store:
            app.state.store.close()
            app.state.store = None
        print("👋 Shutting down")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Hospital directory with nearby lookup, search, statistics and spreadsheet import",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers with prefixes
    app.include_router(system_router, prefix="/api", tags=["System"])
    app.include_router(hospital_router, prefix="/api/hospitals", tags=["Hospitals"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("hospital_finder.main:app", host=default_settings.HOST, port=default_settings.PORT)
