import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}

def _env_list(name: str, default: str) -> list:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]

def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default

class Config:
    # Environment
    APP_ENV = os.getenv("APP_ENV", "production").strip().lower()
    DEBUG = _env_bool("DEBUG", APP_ENV == "development")

    # Security
    SECRET_KEY = os.getenv("SECRET_KEY")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
    ADMIN_TOKEN_EXPIRE_HOURS = os.getenv("ADMIN_TOKEN_EXPIRE_HOURS", "12")

    # Database
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/campus_chatbot")
    MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "")
    MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

    # Cross-origin allow-list for the widget front ends
    ALLOWED_ORIGINS = _env_list("ALLOWED_ORIGINS", "http://localhost:4200,http://127.0.0.1:4200")
    ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]
    ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"]
    CORS_MAX_AGE = 86400

    # Contact fallbacks used when app_settings rows are missing
    CONTACT_DEFAULTS = {
        "phone": os.getenv("CONTACT_PHONE", "+44 20 7123 4567"),
        "email": os.getenv("CONTACT_EMAIL", "info@lsdb.edu"),
        "address": os.getenv("CONTACT_ADDRESS", "London, UK"),
        "hours": os.getenv("CONTACT_HOURS", "Mon-Fri 9:00-17:00"),
    }

    # Widget client
    CHATBOT_API_URL = os.getenv("CHATBOT_API_URL", "http://localhost:8080/api")
    CHATBOT_API_TIMEOUT = _env_float("CHATBOT_API_TIMEOUT", 10.0)

    # Option categories served by the option store
    OPTION_CATEGORIES = ("main", "courses", "internships")

    INTERACTION_TYPES = {
        "start_chat",
        "option_select",
        "course_inquiry",
        "internship_inquiry",
        "contact_request",
        "restart",
        "general",
    }
