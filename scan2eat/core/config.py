import os

from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./scan2eat.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.strip().lower()
IS_TEST = ENV_NORMALIZED == "test"
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Auth (shared-secret tokens)
ACCESS_TOKEN_HEADER = os.getenv("ACCESS_TOKEN_HEADER", "x-access-token").strip().lower()
CASHIER_TOKEN = os.getenv("CASHIER_TOKEN", "").strip()
KITCHEN_TOKEN = os.getenv("KITCHEN_TOKEN", "").strip()

# CORS
DEFAULT_PROD_ORIGINS = [
    "https://scan2eat-frontend.vercel.app",
    "https://scan2eat-cashier.netlify.app",
    "https://scan2eat-kitchen.netlify.app",
]
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip()]

if not CORS_ORIGINS:
    CORS_ORIGINS = list(DEFAULT_PROD_ORIGINS) if IS_PROD else ["*"]

# Rate limit (/api)
RATE_LIMIT_MAX = int(os.getenv("RATE_LIMIT_MAX", "100" if IS_PROD else "1000"))
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

# Catalog
MENU_ITEM_DEFAULT_AVAILABLE = os.getenv("MENU_ITEM_DEFAULT_AVAILABLE", "1").strip().lower() in _TRUTHY

# Live updates
BROADCAST_SEND_TIMEOUT_SECONDS = float(os.getenv("BROADCAST_SEND_TIMEOUT_SECONDS", "5"))
