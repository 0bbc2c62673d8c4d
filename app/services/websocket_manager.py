from fastapi import WebSocket
from typing import Dict, Set
import json
import logging

from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

class WebSocketManager:
    def __init__(self):
        # Store active connections by user id
        self.active_connections: Dict[str, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, user_id: str):
        """Register an accepted WebSocket for a user"""
        # Note: websocket.accept() is called in the main endpoint, not here
        self.active_connections.setdefault(user_id, set()).add(websocket)
        logger.info(f"User {user_id} connected. Total connections: {len(self.active_connections[user_id])}")

        await self.send_personal_message(
            {
                "type": "connection",
                "message": "Connected to notification service",
                "timestamp": utcnow().isoformat()
            },
            websocket
        )

    def disconnect(self, websocket: WebSocket, user_id: str):
        if user_id in self.active_connections:
            self.active_connections[user_id].discard(websocket)

            # Remove user if no more connections
            if not self.active_connections[user_id]:
                del self.active_connections[user_id]

            logger.info(f"User {user_id} disconnected. Remaining connections: {len(self.active_connections.get(user_id, set()))}")

    async def send_personal_message(self, message: dict, websocket: WebSocket):
        await websocket.send_text(json.dumps(message))

    async def send_notification_to_user(self, user_id: str, notification: dict):
        """Send a notification to all connections of a specific user"""
        if user_id not in self.active_connections:
            logger.debug(f"User {user_id} not connected, notification stays in the database")
            return

        message = {
            "type": "notification",
            "data": notification,
            "timestamp": utcnow().isoformat()
        }

        disconnected_websockets = set()
        for websocket in list(self.active_connections[user_id]):
            try:
                await self.send_personal_message(message, websocket)
            except Exception as e:
                logger.error(f"Error sending notification to user {user_id}: {e}")
                disconnected_websockets.add(websocket)

        # Clean up disconnected websockets
        for websocket in disconnected_websockets:
            self.disconnect(websocket, user_id)

# Global instance
websocket_manager = WebSocketManager()
