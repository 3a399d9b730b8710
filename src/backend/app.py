# src/backend/app.py
import logging
import mimetypes
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi import HTTPException as FastAPIHTTPException

from starlette.exceptions import HTTPException as StarletteHTTPException

from src.backend.config import Settings, settings as default_settings
from src.backend.crud.employee import RecordStore
from src.backend.middleware.request_logging import request_logging_middleware
from src.backend.routes.employees_api import router as employees_router
from src.backend.utils.error_handler import custom_exception_handler
from src.backend.utils.exceptions import DirectoryError
from src.backend.utils.logger import configure_logging
from src.backend.utils.media import PhotoStore

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────
# Ensure modern image types return correct Content-Type
# ─────────────────────────────────────────────────────────
mimetypes.add_type("image/avif", ".avif")
mimetypes.add_type("image/webp", ".webp")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    app = FastAPI(title="employee-directory", version="1.0")

    # ----------------------------------------------------------
    # STORES (one per app; handlers get them through Depends)
    # ----------------------------------------------------------
    record_store = RecordStore(settings.DATA_FILE)
    photo_store = PhotoStore(settings.UPLOAD_DIR, settings.UPLOAD_URL)
    app.state.settings = settings
    app.state.record_store = record_store
    app.state.photo_store = photo_store

    # ----------------------------------------------------------
    # STATIC FILES (uploaded photos)
    # ----------------------------------------------------------
    upload_root = photo_store.ensure_root()
    app.mount(photo_store.url_prefix, StaticFiles(directory=str(upload_root)), name="uploads")

    # ----------------------------------------------------------
    # MIDDLEWARE
    # ----------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(request_logging_middleware)

    # ----------------------------------------------------------
    # CUSTOM ERROR HANDLERS
    # ----------------------------------------------------------
    # 1) Domain errors raised by stores and handlers
    app.add_exception_handler(DirectoryError, custom_exception_handler)

    # 2) Starlette HTTPException (routing 404, 405 etc.)
    app.add_exception_handler(StarletteHTTPException, custom_exception_handler)

    # 3) FastAPI HTTPException
    app.add_exception_handler(FastAPIHTTPException, custom_exception_handler)

    # 4) Validation errors
    app.add_exception_handler(RequestValidationError, custom_exception_handler)

    # 5) Catch-all
    app.add_exception_handler(Exception, custom_exception_handler)

    # ----------------------------------------------------------
    # ROUTERS
    # ----------------------------------------------------------
    app.include_router(employees_router)

    logger.info(
        "Employee directory ready | data_file=%s upload_dir=%s",
        record_store.data_file,
        upload_root,
    )
    return app
