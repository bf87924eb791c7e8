from flask import current_app, request
from cubegrid import socketio
from cubegrid.services.grid import BroadcastChannel, Connection

NAMESPACE = '/ws'


class SocketIOConnection(Connection):
    """Viewer connection backed by a Socket.IO session id."""

    def __init__(self, sid: str, namespace: str = NAMESPACE):
        super().__init__(sid)
        self.namespace = namespace

    def _deliver(self, text: str) -> None:
        # Plain 'message' packets carry the JSON text frame unchanged
        socketio.send(text, to=self.sid, namespace=self.namespace)


def _channel() -> BroadcastChannel:
    return current_app.extensions['cubegrid']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect():
    _channel().on_connect(SocketIOConnection(_get_sid(), request.namespace))


def handle_disconnect(*_args):
    _channel().on_disconnect(_get_sid())


def _live_connection():
    channel = _channel()
    sid = _get_sid()
    conn = channel.get(sid)
    if conn is None:
        # Message raced with the disconnect; nothing to answer to
        current_app.logger.debug(f"[ws-orphan] sid={sid}")
    return channel, conn


def handle_message(*args):
    channel, conn = _live_connection()
    if conn is None:
        return
    if len(args) != 1:
        # A command frame carries exactly one payload
        channel.send_error(conn, 'Invalid message')
        return
    channel.on_message(conn, args[0])


def handle_unknown(event, *_args):
    channel, conn = _live_connection()
    if conn is None:
        return
    current_app.logger.debug(f"[ws-unknown-event] sid={conn.sid} event={event!r}")
    channel.send_error(conn, 'Unknown message type')


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('message', handle_message, namespace=NAMESPACE)
    # Clients that send with json=True arrive as 'json' events
    socketio.on_event('json', handle_message, namespace=NAMESPACE)
    # Any other event name is not a command this server understands
    socketio.on_event('*', handle_unknown, namespace=NAMESPACE)
