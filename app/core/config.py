import os
from dotenv import load_dotenv

load_dotenv()

# -------- DATABASE --------
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./apartments.db")

# -------- AUTH --------
JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# -------- PAYMENTS --------
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "INR")

# -------- BOOKING RULES --------
HOLD_MINUTES = int(os.getenv("HOLD_MINUTES", 30))
MAX_GUESTS_PER_BOOKING = int(os.getenv("MAX_GUESTS_PER_BOOKING", 10))
MAX_STAY_NIGHTS = int(os.getenv("MAX_STAY_NIGHTS", 90))

# -------- REDIS (cache + rate limiting) --------
REDIS_URL = os.getenv("REDIS_URL")
CACHE_PREFIX = os.getenv("CACHE_PREFIX", "apartments")
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", 60))
REDIS_RETRY_SECONDS = int(os.getenv("REDIS_RETRY_SECONDS", 30))
HOLD_RATE_LIMIT = int(os.getenv("HOLD_RATE_LIMIT", 5))
HOLD_RATE_WINDOW_SECONDS = int(os.getenv("HOLD_RATE_WINDOW_SECONDS", 60))

# -------- LOGGING --------
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_CONSOLE = os.getenv("LOG_TO_CONSOLE", "false").lower() == "true"

# -------- CLOUDINARY --------
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
