import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from watchly.config import settings
from watchly.integrations.tmdb_client import close_tmdb_client
from watchly.recommender.errors import MoodRequiredError, RecommendationError
from watchly.web.routes import auth, follows, movies, profiles, recommend, watch_logs
from watchly.web.routes.recommend import MOOD_RECOMMENDATIONS_PATH
from watchly.web.services.tmdb_cache_service import close_tmdb_cache_service
from watchly.web.utils.database import mask_url, normalize_database_url

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Watchly API đã khởi động!")
    logger.info(f"💾 Database: {mask_url(normalize_database_url(settings.database_url))}")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set. Mood recommendations will return 500.")
    if not settings.tmdb_api_key:
        logger.warning("TMDB_API_KEY is not set. Recommendations will not have posters.")
    yield
    await close_tmdb_client()
    await close_tmdb_cache_service()


app = FastAPI(
    title="Watchly API",
    description="Social movie/TV tracking: watch logs, follows, feed và mood recommendations",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration; credentials không thể đi cùng wildcard origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=CORS_ALLOW_HEADERS,
)


def _is_mood_path(request: Request) -> bool:
    return request.url.path.rstrip("/") == MOOD_RECOMMENDATIONS_PATH


# Đăng ký sau CORSMiddleware nên chạy trước nó
@app.middleware("http")
async def mood_preflight_middleware(request: Request, call_next):
    """
    OPTIONS trên mood endpoint luôn trả về 200 với body rỗng và CORS headers,
    kể cả khi browser xin thêm headers ngoài danh sách.
    """
    if request.method != "OPTIONS" or not _is_mood_path(request):
        return await call_next(request)

    headers = {
        "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }
    origin = request.headers.get("origin")
    if "*" in settings.cors_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin in settings.cors_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"
        headers["Vary"] = "Origin"

    return Response(status_code=200, headers=headers)


# Request timeout middleware
@app.middleware("http")
async def timeout_middleware(request: Request, call_next):
    """
    Timeout requests sau REQUEST_TIMEOUT_SECONDS (mặc định 120 giây) và log requests chậm.
    """
    start_time = time.time()

    try:
        response = await asyncio.wait_for(call_next(request), timeout=settings.request_timeout_seconds)
    except asyncio.TimeoutError:
        logger.error(f"Request timeout: {request.method} {request.url.path}")
        return JSONResponse(
            status_code=504,
            content={"detail": "Request timeout. Please try again."}
        )

    process_time = time.time() - start_time
    if process_time > settings.slow_request_seconds:
        logger.warning(
            f"Slow request: {request.method} {request.url.path} "
            f"took {process_time:.2f}s"
        )

    return response


@app.exception_handler(RecommendationError)
async def recommendation_error_handler(request: Request, exc: RecommendationError):
    if exc.status_code >= 500:
        logger.error(f"Error in mood recommendations: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Body không hợp lệ trên mood endpoint -> 400 {"error": ...}; các route khác giữ 422."""
    if _is_mood_path(request):
        logger.info(f"Invalid mood request body: {exc.errors()}")
        return await recommendation_error_handler(request, MoodRequiredError())
    return await request_validation_exception_handler(request, exc)


# Include routers
app.include_router(auth.router)
app.include_router(profiles.router)
app.include_router(follows.router)
app.include_router(watch_logs.router)
app.include_router(movies.router)
app.include_router(recommend.router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Watchly API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "watchly-api"}
