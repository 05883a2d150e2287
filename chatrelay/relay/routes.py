from fastapi import APIRouter, Request, WebSocket

from chatrelay.relay.websocket_handler import websocket_endpoint

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "relay": request.app.state.hub.stats(),
        "pending_notifications": request.app.state.notifications.pending,
    }


@router.websocket("/ws")
async def relay_socket(websocket: WebSocket):
    await websocket_endpoint(websocket=websocket)
