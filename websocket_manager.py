# websocket_manager.py

from typing import List, Dict
from fastapi import WebSocket
import logging

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        # Dashboard connections, keyed by restaurant owner id
        self.staff_connections: Dict[int, List[WebSocket]] = {}
        # Customer connections, keyed by table id
        self.table_connections: Dict[int, List[WebSocket]] = {}

    @staticmethod
    def _add(pool: Dict[int, List[WebSocket]], key: int, websocket: WebSocket):
        pool.setdefault(key, []).append(websocket)

    @staticmethod
    def _remove(pool: Dict[int, List[WebSocket]], key: int, websocket: WebSocket):
        if key in pool:
            if websocket in pool[key]:
                pool[key].remove(websocket)
            if not pool[key]:
                del pool[key]

    async def _send_all(self, pool: Dict[int, List[WebSocket]], key: int, message: dict):
        dead = []
        for connection in list(pool.get(key, [])):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f"Dropping websocket for #{key}: {e}")
                dead.append(connection)
        for connection in dead:
            self._remove(pool, key, connection)

    async def connect_staff(self, websocket: WebSocket, user_id: int):
        self._add(self.staff_connections, user_id, websocket)
        await websocket.accept()

    def disconnect_staff(self, websocket: WebSocket, user_id: int):
        self._remove(self.staff_connections, user_id, websocket)

    async def connect_table(self, websocket: WebSocket, table_id: int):
        self._add(self.table_connections, table_id, websocket)
        await websocket.accept()

    def disconnect_table(self, websocket: WebSocket, table_id: int):
        self._remove(self.table_connections, table_id, websocket)

    async def broadcast_staff(self, message: dict):
        """Sends to every dashboard of the owner named by message['user_id']."""
        await self._send_all(self.staff_connections, message.get("user_id"), message)

    async def broadcast_table(self, table_id: int, message: dict):
        await self._send_all(self.table_connections, table_id, message)


manager = ConnectionManager()
