import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import Settings, settings as default_settings
from create_tables import create_tables
from database import Database
from modules.approvers.controllers.predefined_approver_controller import router as approver_router
from modules.approvers.repositories.predefined_approver_repository import PredefinedApproverRepository
from modules.approvers.services.predefined_approver_service import PredefinedApproverService
from modules.documents.controllers.admin_controller import router as admin_router
from modules.documents.controllers.approval_controller import router as approval_router
from modules.documents.controllers.document_controller import router as document_router
from modules.documents.exceptions import WorkflowError
from modules.documents.services.pdf_service import PdfService
from modules.documents.storage import LocalFileStorage

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _seed_predefined_approvers(database: Database) -> None:
    with database.session() as session:
        PredefinedApproverService(PredefinedApproverRepository(session)).seed_defaults()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # --- Startup logic ---
        logger.info("Starting approval workflow service")
        database = Database(settings.database_url).open()
        create_tables(database)
        if settings.seed_predefined_approvers:
            _seed_predefined_approvers(database)
        app.state.database = database
        app.state.storage = LocalFileStorage(settings.upload_dir, settings.uploads_url_prefix)
        app.state.pdf_service = PdfService(settings.assets_dir, settings.stamp_font_path)
        yield
        # --- Shutdown logic ---
        database.close()
        logger.info("Approval workflow service stopped")

    app = FastAPI(
        title="Document Approval Workflow",
        description="Upload, sign and collect approvals on PDF documents",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": str(exc), "error": exc.kind},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"detail": problems or "Invalid request", "error": "validation_error"},
        )

    # Routers
    app.include_router(document_router, prefix="/documents", tags=["documents"])
    app.include_router(approval_router, prefix="/approvals", tags=["approvals"])
    app.include_router(approver_router, prefix="/approvers", tags=["approvers"])
    app.include_router(admin_router, prefix="/admin", tags=["admin"])

    app.mount(
        settings.uploads_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads"
    )
    return app


configure_logging(default_settings.log_level)
app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
