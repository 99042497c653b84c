
import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./esign.db")
MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "minio:9000")
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "minioadmin")
MINIO_BUCKET = os.getenv("MINIO_BUCKET", "signing")
SECRET_KEY = os.getenv("SECRET_KEY", "devsecret")
OPERATOR_ACCESS_TOKEN = os.getenv("OPERATOR_ACCESS_TOKEN")
WEB_BASE_URL = os.getenv("WEB_BASE_URL", "http://localhost:3000")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(25 * 1024 * 1024)))
DISPATCH_TIMEOUT_SECONDS = float(os.getenv("DISPATCH_TIMEOUT_SECONDS", "30"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
