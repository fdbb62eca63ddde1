"""Socket.IO nudge channel.

Clients may join the room of a session code and receive ``state_update``
whenever that session changes, and ``session_ended`` when it is purged. The
events carry no state; clients still fetch snapshots over HTTP, so a missed
nudge only delays an update until the next poll.
"""
from flask_socketio import join_room, leave_room, emit
from vaulthunt import socketio


def _room(session_code: str) -> str:
    return f"session:{session_code.upper()}"


def notify_state_update(session_code: str) -> None:
    socketio.emit('state_update', {'sessionCode': session_code}, to=_room(session_code), namespace='/ws')


def notify_session_ended(session_code: str) -> None:
    socketio.emit('session_ended', {'sessionCode': session_code}, to=_room(session_code), namespace='/ws')


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_session(data):
    session_code = (data or {}).get('sessionCode')
    if not session_code:
        emit('error', {'message': 'sessionCode is required'})
        return
    room = _room(session_code)
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_session(data):
    session_code = (data or {}).get('sessionCode')
    if not session_code:
        emit('error', {'message': 'sessionCode is required'})
        return
    room = _room(session_code)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_session', handle_join_session, namespace=namespace)
        socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
