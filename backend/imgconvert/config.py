"""Application configuration. Loads from environment and .env file."""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then backend/.env, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")
load_dotenv(BASE_DIR.parent / ".env")

# Static client application (index.html, script.js, style.css)
STATIC_DIR = Path(os.getenv("STATIC_DIR", str(BASE_DIR / "public")))

# Encoder settings
WEBP_QUALITY = 80
TIFF_QUALITY = 80

# Batch archive
ZIP_FILENAME = "converted-images.zip"
ZIP_COMPRESS_LEVEL = 9

# Server (for uvicorn)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
# CORS: comma-separated origins, e.g. "http://localhost:5173,http://127.0.0.1:5173". Empty allows all.
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("converter")
