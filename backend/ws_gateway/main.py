"""
WebSocket Gateway routes.

Mounted by the REST API application: the gateway shares its process, its
settings and its JWT secret. The gateway instance lives on app.state and is
created by rest_api.main.create_app().
"""

from fastapi import APIRouter, Request, WebSocket

from ws_gateway.gateway import RealtimeGateway

router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    gateway: RealtimeGateway = websocket.app.state.gateway
    await gateway.handle_connection(websocket)


@router.get("/ws/health")
def ws_health(request: Request) -> dict:
    """Connection counts of the gateway."""
    gateway: RealtimeGateway = request.app.state.gateway
    return {"status": "healthy", **gateway.stats()}
