import logging
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.calendar.errors import CalendarError, NotFoundError, RemoteFailure
from app.routers import health, occasions, wear
from app.routers import calendar as calendar_router

app = FastAPI(title=settings.APP_NAME)

# CORS
origins = settings.cors_origin_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins if origins != ["*"] else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

prefix = settings.API_PREFIX
app.include_router(health.router, prefix=prefix)
app.include_router(calendar_router.router, prefix=prefix)
app.include_router(occasions.router, prefix=prefix)
app.include_router(wear.router, prefix=prefix)

logger = logging.getLogger("app.requests")


@app.exception_handler(CalendarError)
async def calendar_error_handler(request: Request, exc: CalendarError):
    if isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, RemoteFailure):
        status = 502
        logger.warning("remote failure on %s %s: %s", request.method, request.url.path, exc)
    else:
        status = 422
    return JSONResponse(status_code=status, content={"detail": exc.code, "message": str(exc)})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, duration_ms)
    return response


@app.get("/")
async def root():
    return {"name": settings.APP_NAME, "env": settings.APP_ENV}
