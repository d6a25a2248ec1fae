import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config import settings
from database import init_db
from api.admin import router as admin_router
from api.applications import router as applications_router
from api.catalog import categories_router, loans_router
from api.eligibility import router as eligibility_router
from api.errors import register_exception_handlers
from api.form_fields import router as form_fields_router
from api.settings import router as settings_router
from api.uploads import router as uploads_router

logger = logging.getLogger("lending.api")


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("startup database=%s", settings.database_url.split("://")[0])
    yield


configure_logging()

app = FastAPI(
    title=settings.app_name,
    description="Dynamic loan application forms and review lifecycle API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Reuse the caller's X-Request-ID or mint one; log one access line per request."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id

    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    response.headers["X-Request-ID"] = request_id
    logger.info(
        "access request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


register_exception_handlers(app)

app.include_router(form_fields_router)
app.include_router(categories_router)
app.include_router(loans_router)
app.include_router(applications_router)
app.include_router(eligibility_router)
app.include_router(admin_router)
app.include_router(uploads_router)
app.include_router(settings_router)

Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount(settings.upload_url_prefix, StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/health")
async def health():
    return {"status": "ok"}
