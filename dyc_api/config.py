# dyc_api/config.py
# Central place for settings and constants, read once from the environment
import os

from dotenv import load_dotenv

load_dotenv()

# --- Environment ---
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
API_URL = os.getenv("API_URL", "http://localhost:3001").rstrip("/")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]

# --- Database ---
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB = os.getenv("MONGO_DB", "dyc-db")

# --- Security & JWT ---
# In production, set JWT_SECRET from a secret store
JWT_SECRET = os.getenv("JWT_SECRET", "a_very_secret_key_for_dev_only")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24"))
OAUTH_STATE_EXPIRE_MINUTES = 10

# Bootstrap admin, provisioned on its first login
ADMIN_USER = os.getenv("ADMIN_USER", "admin")
ADMIN_PASS = os.getenv("ADMIN_PASS", "admin")

# --- Google OAuth ---
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
GOOGLE_CALLBACK_PATH = "/api/auth/oauth/google/callback"

# --- Uploads ---
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
PROFILE_PHOTO_FIELDS = ("fotoPerfil", "fotoCuerpoCompleto", "fotoPortada")

# --- Pagination ---
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
