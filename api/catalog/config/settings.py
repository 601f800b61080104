import os
from pathlib import Path
from dotenv import load_dotenv
import logging
import sys
from typing import List

# .env values never override variables already set in the process
load_dotenv()

ENV = os.getenv("ENV", "development")
IS_PRODUCTION = ENV == "production"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if IS_PRODUCTION else "DEBUG")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = os.getenv("LOG_FILE")

logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    handlers=[logging.StreamHandler(sys.stdout)]
)

# Third-party loggers that are chatty at DEBUG
for _noisy in ('botocore', 'boto3', 'urllib3', 's3transfer',
               'multipart', 'multipart.multipart', 'sqlalchemy.engine'):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logging.getLogger('uvicorn').setLevel(logging.INFO)

logger = logging.getLogger(__name__)

if LOG_FILE:
    if IS_PRODUCTION:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
    else:
        file_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(file_handler)

# api/ directory; default locations for the SQLite file and local uploads
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Bearer tokens are issued elsewhere and signed with this shared key
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not JWT_SECRET_KEY:
    if IS_PRODUCTION:
        raise ValueError("JWT_SECRET_KEY is required when ENV=production")
    logger.warning("JWT_SECRET_KEY is not set; falling back to an insecure development key")
    JWT_SECRET_KEY = "catalog-dev-secret"

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
ADMIN_ROLE = "admin"

# Catalog database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'catalog.db'}")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

# Uploads
MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", str(50 * 1024 * 1024)))
RECENT_DOWNLOADS_LIMIT = int(os.getenv("RECENT_DOWNLOADS_LIMIT", "10"))

API_TITLE = "Resource Catalog"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Catalog of question papers, study material and syllabi organized by program and semester"

# Admin and student front-ends during development
CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def parse_cors_origins(raw: str) -> List[str]:
    """Split a comma or semicolon separated origin list, keeping only http(s) origins"""
    origins = []
    for origin in raw.replace(';', ',').split(','):
        origin = origin.strip()
        if not origin:
            continue
        if not origin.startswith(('http://', 'https://')):
            logger.warning(f"Ignoring CORS origin without http(s) scheme: '{origin}'")
        elif origin not in origins:
            origins.append(origin)
    return origins


if os.getenv("CORS_ORIGINS"):
    _origins = parse_cors_origins(os.getenv("CORS_ORIGINS"))
    if _origins:
        CORS_ORIGINS = _origins
    else:
        logger.warning("CORS_ORIGINS contained no usable origin; keeping the development defaults")

# S3 object store; used only when key, secret and bucket are all present
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")
AWS_REGION = (os.getenv("AWS_REGION") or "").strip() or "ap-south-1"
S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME")

# Public URL prefix of stored objects; override when a CDN fronts the bucket
S3_BASE_URL = os.getenv("S3_BASE_URL")
if not S3_BASE_URL and S3_BUCKET_NAME:
    S3_BASE_URL = f"https://{S3_BUCKET_NAME}.s3.{AWS_REGION}.amazonaws.com"

STORAGE_PREFIX = os.getenv("STORAGE_PREFIX", "resources").strip("/")

# Local object store used when S3 is not configured
LOCAL_STORAGE_DIR = os.path.abspath(os.getenv("LOCAL_STORAGE_DIR", os.path.join(BASE_DIR, "storage")))
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000/files").rstrip("/")

logger.info(f"Catalog settings loaded: env={ENV}, version={API_VERSION}, max upload={MAX_FILE_SIZE} bytes")
logger.info(f"Object store: {'s3://' + S3_BUCKET_NAME if S3_BUCKET_NAME else LOCAL_STORAGE_DIR}")
logger.debug(f"CORS origins: {CORS_ORIGINS}")
