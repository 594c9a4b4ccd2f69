#!/usr/bin/env python3
"""Start the signaling relay under uvicorn"""

import uvicorn

from signaling_relay.config import HOST, LOG_LEVEL, PORT, RELOAD

if __name__ == "__main__":
    uvicorn.run(
        "signaling_relay.main:app",
        host=HOST,
        port=PORT,
        reload=RELOAD,
        log_level=LOG_LEVEL,
        access_log=True
    )
