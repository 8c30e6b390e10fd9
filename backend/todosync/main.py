# todosync/main.py
import datetime as dt
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from todosync.config import settings
from todosync.core.db import init_db, close_db
from todosync.api.error_handling import register_exception_handlers
from todosync.api.v1.routers import auth, todos, stream

logger = logging.getLogger("uvicorn.error")
logger.setLevel(settings.log_level.upper())

app = FastAPI(title=settings.APP_NAME)

# CORS for the browser client (bearer tokens, no cookies)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

@app.on_event("startup")
async def on_startup():
    await init_db()
    logger.info("[startup] %s ready (env=%s, prefix=%s)", settings.APP_NAME, settings.env, settings.api_prefix)

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(todos.router, prefix=settings.api_prefix)

# Server-Sent Events
app.include_router(stream.router, prefix=settings.api_prefix)

@app.get(f"{settings.api_prefix}/health")
def health():
    return {"status": "OK", "timestamp": dt.datetime.now(dt.timezone.utc).isoformat()}

@app.get("/healthz")
def healthz():
    return {"ok": True}


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("todosync.main:app", host=settings.host, port=settings.port)
