import json
import logging
import threading
from typing import Any, Dict, Optional, Union

from .state import GridAuthority, InvalidCubeId


class Connection:
    """One live viewer channel.

    Subclasses implement ``_deliver`` for their transport. ``send`` refuses
    to write once the connection has been closed.
    """

    def __init__(self, sid: str):
        self.sid = sid
        self.is_open = True

    def send(self, text: str) -> None:
        if not self.is_open:
            raise ConnectionError(f"connection {self.sid} is closed")
        self._deliver(text)

    def close(self) -> None:
        self.is_open = False

    def _deliver(self, text: str) -> None:
        raise NotImplementedError

    def __repr__(self):
        state = 'open' if self.is_open else 'closed'
        return f"<{type(self).__name__} sid={self.sid} {state}>"


class BroadcastChannel:
    """Live connection set plus command routing to the grid authority.

    Connect, disconnect, message handling and fan-out all run under one
    dispatch lock, so events reach viewers in the order the authority
    committed them.
    """

    def __init__(self, authority: GridAuthority, logger: Optional[logging.Logger] = None):
        self.authority = authority
        self.logger = logger or logging.getLogger(__name__)
        self._connections: Dict[str, Connection] = {}
        self._dispatch = threading.RLock()

    def get(self, sid: str) -> Optional[Connection]:
        return self._connections.get(sid)

    def active_count(self) -> int:
        return sum(1 for conn in list(self._connections.values()) if conn.is_open)

    # ---- lifecycle ----

    def on_connect(self, conn: Connection) -> None:
        with self._dispatch:
            self._connections[conn.sid] = conn
            self._send(conn, self.authority.snapshot())
            count = self.active_count()
            self.logger.info(f"[ws-connect] sid={conn.sid} active={count}")
            self.broadcast({'type': 'active', 'count': count})

    def on_disconnect(self, conn: Union[Connection, str]) -> None:
        sid = conn if isinstance(conn, str) else conn.sid
        with self._dispatch:
            dropped = self._connections.pop(sid, None)
            if dropped is None:
                return
            dropped.close()
            count = self.active_count()
            self.logger.info(f"[ws-disconnect] sid={sid} active={count}")
            self.broadcast({'type': 'active', 'count': count})

    # ---- commands ----

    def on_message(self, conn: Connection, raw: Any) -> None:
        message = self._parse(raw)
        if message is None:
            self.send_error(conn, 'Invalid message')
            return

        kind = message.get('type')
        with self._dispatch:
            if kind == 'remove':
                self._handle_remove(conn, message)
            elif kind == 'reset':
                self._handle_reset(conn)
            else:
                self.send_error(conn, 'Unknown message type')

    def _handle_remove(self, conn: Connection, message: Dict[str, Any]) -> None:
        key = message.get('id')
        wallet = message.get('wallet')
        if wallet is not None and not isinstance(wallet, str):
            wallet = str(wallet)
        try:
            event = self.authority.remove(key, wallet)
        except InvalidCubeId:
            self.send_error(conn, 'Invalid cube id')
            return
        if event is None:
            self.logger.debug(f"[cube-duplicate] id={key} sid={conn.sid}")
            return
        self.logger.info(
            f"[cube-removed] id={key} clickedCount={event['clickedCount']} wallet={event['wallet']!r}"
        )
        self.broadcast(event)

    def _handle_reset(self, conn: Connection) -> None:
        event = self.authority.reset()
        self.logger.info(f"[grid-reset] sid={conn.sid} cubes={len(event['cubes'])}")
        self.broadcast(event)

    @staticmethod
    def _parse(raw: Any) -> Optional[Dict[str, Any]]:
        if isinstance(raw, dict):
            return raw
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = raw.decode('utf-8')
            except UnicodeDecodeError:
                return None
        if not isinstance(raw, str):
            return None
        try:
            message = json.loads(raw)
        except ValueError:
            return None
        return message if isinstance(message, dict) else None

    # ---- delivery ----

    def broadcast(self, event: Dict[str, Any]) -> int:
        """Deliver ``event`` to every open connection; returns the number reached."""
        payload = json.dumps(event)
        delivered = 0
        with self._dispatch:
            targets = list(self._connections.values())
            for conn in targets:
                if not conn.is_open:
                    continue
                try:
                    conn.send(payload)
                    delivered += 1
                except Exception as exc:
                    self.logger.warning(f"[broadcast-fail] sid={conn.sid} type={event.get('type')} error={exc}")
        return delivered

    def send_error(self, conn: Connection, message: str) -> None:
        self._send(conn, {'type': 'error', 'message': message})

    def _send(self, conn: Connection, event: Dict[str, Any]) -> None:
        try:
            conn.send(json.dumps(event))
        except Exception as exc:
            self.logger.warning(f"[send-fail] sid={conn.sid} type={event.get('type')} error={exc}")
