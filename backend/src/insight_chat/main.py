from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from .routes import chat, data
from .deps import check_services, get_llm, get_sql_store
from .providers.gemini_provider import HTTPGeminiProvider
from .services.sql_store import SQLStore
from .config import settings
from .utils.logs import get_logger
import os

logger = get_logger(__name__)

# Initialize FastAPI app
app = FastAPI(title="E-commerce Insights Chat")

if settings.render_charts:
    os.makedirs(settings.charts_dir, exist_ok=True)
    # Mount static files for chart images
    app.mount("/static/charts", StaticFiles(directory=settings.charts_dir), name="charts")


# Add startup event to open the store and check the completion-service credential
@app.on_event("startup")
async def startup_event():
    results = await check_services()
    if results.get("llm") != "ok":
        logger.warning(f"[startup] {results['llm']}")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request", "detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"[api_error] {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error", "message": str(exc)})


@app.get("/api/health")
async def health_check(store: SQLStore = Depends(get_sql_store), llm: HTTPGeminiProvider = Depends(get_llm)):
    services = await check_services(store=store, llm=llm)
    return {
        "status": "ok" if services.get("duckdb") == "ok" else "degraded",
        "services": services,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# Routers already define their own prefixes; avoid double prefixing
app.include_router(chat.router)
app.include_router(data.router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
