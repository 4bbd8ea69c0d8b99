# main.py
from config import settings  # loads .env before the services read os.getenv
from config.logging_config import configure_logging

configure_logging()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from middleware.rate_limit import limiter
from middleware.request_logging import RequestLoggingMiddleware
from routers.analyst_routes import router as analyst_router
from routers.insights_routes import router as insights_router
from routers.volume_routes import router as volume_router


app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include routers
app.include_router(analyst_router, prefix="/api/analyst")
app.include_router(insights_router, prefix="/api/insights")
app.include_router(volume_router, prefix="/api/volume")


@app.get("/health")
async def health():
    return {"status": "ok"}
