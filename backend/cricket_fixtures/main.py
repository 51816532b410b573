import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cricket_fixtures.database import init_db
from cricket_fixtures.routes import fixtures, standings, templates

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Cricket Fixtures API")

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(fixtures.router, prefix="/api", tags=["fixtures"])
app.include_router(standings.router, prefix="/api", tags=["standings"])
app.include_router(templates.router, prefix="/api", tags=["templates"])


@app.on_event("startup")
def on_startup():
    init_db()  # Use centralized init_db() which imports models and creates tables
    logger.info("Cricket Fixtures API started with %d routes", len(app.routes))


@app.get("/api/health")
def health_check():
    return {"app_name": "Cricket Fixtures API", "status": "healthy"}
