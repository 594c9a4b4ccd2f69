import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()

# Path of the signaling WebSocket endpoint
WS_PATH = os.getenv("WS_PATH", "/ws")

# Comma separated list of allowed browser origins
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]
