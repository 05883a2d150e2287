import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatrelay.config import settings
from chatrelay.db.session import init_db
from chatrelay.api.admin.routes import router as admin_router
from chatrelay.api.messages.routes import router as messages_router
from chatrelay.api.push.routes import router as push_router
from chatrelay.relay.routes import router as relay_router
from chatrelay.relay.connections import RoomHub
from chatrelay.relay.notifications import NotificationDispatcher

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database connected successfully")
    yield
    await app.state.notifications.drain(timeout=settings.NOTIFICATION_DRAIN_SECONDS)
    logger.info("Relay shut down")

app = FastAPI(title="chatrelay", lifespan=lifespan)

# One broadcast authority per process
app.state.hub = RoomHub()
app.state.notifications = NotificationDispatcher()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

# Routers
app.include_router(admin_router, prefix="/api/admin", tags=["Admin"])
app.include_router(messages_router, prefix="/api/messages", tags=["Messages"])
app.include_router(push_router, prefix="/api/push", tags=["Push"])
app.include_router(relay_router, tags=["Relay"])

@app.get("/ping")
def ping():
    return {"message": "pong"}
