# --- imports (top of menova/app.py) ---
import os
import json
import sys
import logging
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
from starlette.exceptions import HTTPException as StarletteHTTPException

# Resolve paths early so env vars are available before importing the app modules
BASE_DIR = Path(__file__).resolve().parent
ROOT_DIR = BASE_DIR.parent
ENV_PATH = BASE_DIR / ".env"

if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

load_dotenv(ENV_PATH)

from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from menova.models import init_db
from menova.middleware.tracing import TracingMiddleware
from menova.routes import auth_routes, chat_routes, goals_routes, privacy_routes, symptoms_routes
from menova.routers.profile import router as profile_router
from menova.services.lexicon import default_lexicon
from menova.utils.exceptions import (
    handle_http_exception,
    handle_rate_limit,
    handle_unhandled_exception,
    handle_validation_exception,
)
from menova.utils.rate_limit import limiter


# --- logging setup ---
class JsonFormatter(logging.Formatter):
    def format(self, record):  # type: ignore[override]
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "function": record.funcName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging() -> logging.Logger:
    logger = logging.getLogger("menova")
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    return logger


logger = configure_logging()

# --- app & middleware ---
app = FastAPI(title="MeNova Backend", version="0.1.0")

app.add_middleware(TracingMiddleware)

# ---- Rate limiting (slowapi) ----
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

_origins = [o.strip() for o in (os.getenv("CORS_ORIGINS") or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins or ["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- Error envelope ----
app.add_exception_handler(StarletteHTTPException, handle_http_exception)
app.add_exception_handler(RequestValidationError, handle_validation_exception)
app.add_exception_handler(RateLimitExceeded, handle_rate_limit)
app.add_exception_handler(Exception, handle_unhandled_exception)


@app.on_event("startup")
def _startup():
    init_db()
    # Fail fast on a broken lexicon file rather than on the first request
    lexicon = default_lexicon()
    logger.info({"function": "startup", "status": "ready", "symptoms": list(lexicon.ids())})


@app.get("/api/health")
def health():
    return {"status": "ok"}


app.include_router(auth_routes.router)
app.include_router(profile_router)
app.include_router(symptoms_routes.router)
app.include_router(chat_routes.router)
app.include_router(goals_routes.router)
app.include_router(privacy_routes.router)
