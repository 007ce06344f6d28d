import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from admin import router as admin_router
from auth import router as auth_router
from chat import router as chat_router
from core import db, schema, settings
from products import router as products_router
from profiles import router as profiles_router
from reviews import router as reviews_router
from support import router as support_router
from transactions import router as transactions_router
from uploads import router as uploads_router

logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("marketplace")

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        await schema.ensure_schema()
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Browser frontends call this API with the session cookie.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router, prefix=API_PREFIX, tags=["auth"])
app.include_router(profiles_router.router, prefix=API_PREFIX, tags=["profiles"])
app.include_router(products_router.router, prefix=API_PREFIX, tags=["products"])
app.include_router(uploads_router.router, prefix=API_PREFIX, tags=["uploads"])
app.include_router(transactions_router.router, prefix=API_PREFIX, tags=["transactions"])
app.include_router(reviews_router.router, prefix=API_PREFIX, tags=["reviews"])
app.include_router(chat_router.router, prefix=API_PREFIX, tags=["chat"])
app.include_router(admin_router.router, prefix=API_PREFIX, tags=["admin"])
app.include_router(admin_router.inbox_router, prefix=API_PREFIX, tags=["admin"])
app.include_router(support_router.router, prefix=API_PREFIX, tags=["support"])


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error."})


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get(f"{API_PREFIX}/health")
async def api_health() -> JSONResponse:
    try:
        await db.fetch_val("SELECT 1")
    except Exception as exc:
        logger.error("health_check_failed error=%s", exc)
        return JSONResponse(status_code=500, content={"status": "unhealthy", "database": "disconnected"})
    return JSONResponse(content={"status": "healthy", "database": "connected"})


@app.get("/")
def root() -> dict:
    return {"message": "marketplace api"}
