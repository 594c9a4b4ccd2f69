import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from signaling_relay.routes.rtc.web_socket import websocket_router
from signaling_relay.config import CORS_ORIGINS, LOG_LEVEL, WS_PATH

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI app instance
app = FastAPI(
    title="Signaling Relay",
    description="WebSocket relay forwarding WebRTC negotiation messages between room members",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Browsers open the signaling socket cross-origin from the frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Include routers
app.include_router(websocket_router, tags=["signaling"])

@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Signaling Relay",
        "version": "1.0.0",
        "status": "running",
        "websocket": WS_PATH,
    }
