import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()

LOG_LEVEL = os.getenv("FLOWBRIDGE_LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FLOWBRIDGE_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
