import os

import uvicorn

# Determine environment: "prod" or "local"
ENV = os.getenv("ENV", "local").lower()

# Default settings
HOST = "localhost"
PORT = int(os.getenv("PORT", 8000))
RELOAD = True  # Enable live reload in local development

# Production config
if ENV == "prod":
    HOST = "0.0.0.0"
    RELOAD = False  # Disable reload in production
else:
    print("[Info] Running in local mode, live reload enabled.")

# Start the FastAPI app
if __name__ == "__main__":
    uvicorn.run("chatrelay.main:app", host=HOST, port=PORT, reload=RELOAD)
