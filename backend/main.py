from fastapi import FastAPI
from contextlib import asynccontextmanager
from database import init_db
from api import module_dtos
from dependencies import get_settings
import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from pathlib import Path

from constants import EnvKeys, Defaults

# Configure logging with rotating file handler
LOG_DIR = Path(os.environ.get(EnvKeys.LOG_DIR, Defaults.LOG_DIR))
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / "backend.log"

# Create formatters and handlers
log_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

# File handler with rotation (10MB per file, keep 5 backups)
file_handler = RotatingFileHandler(
    LOG_FILE,
    maxBytes=10 * 1024 * 1024,  # 10MB
    backupCount=5,
    encoding='utf-8'
)
file_handler.setFormatter(log_formatter)
file_handler.setLevel(logging.INFO)

# Console handler
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(log_formatter)
console_handler.setLevel(logging.INFO)

# Configure root logger
root_logger = logging.getLogger()
root_logger.setLevel(logging.INFO)
root_logger.addHandler(file_handler)
root_logger.addHandler(console_handler)

logger = logging.getLogger(__name__)
logger.info(f"Logging initialized: {LOG_FILE}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown"""
    init_db()
    settings = get_settings()
    logger.info(f"Module DTO API started (custom actions: {settings.custom_actions_enabled})")
    yield
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Module DTO API",
    description="Custom and default DTO metadata for generated services",
    version="1.0.0",
    lifespan=lifespan
)

# Include API routers
app.include_router(module_dtos.router, prefix="/api", tags=["module-dtos"])


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    host = os.environ.get(EnvKeys.HOST, Defaults.HOST)
    port = int(os.environ.get(EnvKeys.PORT, Defaults.PORT))
    logger.info(f"Starting Module DTO API on http://{host}:{port}...")
    uvicorn.run(app, host=host, port=port)
