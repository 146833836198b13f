from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from truenorth import socketio
from truenorth.services.trivia.notifier import LEADERBOARD_TOPIC, SOCKET_NAMESPACE


def _sid() -> str:
    # request.sid exists in Socket.IO context
    return getattr(request, 'sid', '?')


def handle_connect():
    current_app.logger.info(f"[ws-connect] sid={_sid()}")
    emit('connected', {'message': f'Connected to {SOCKET_NAMESPACE}'})


def handle_disconnect(*_):
    current_app.logger.info(f"[ws-disconnect] sid={_sid()}")


def handle_leaderboard_subscribe(data=None):
    join_room(LEADERBOARD_TOPIC)
    current_app.logger.info(f"[ws-subscribe] sid={_sid()} room={LEADERBOARD_TOPIC}")
    emit('joined', {'room': LEADERBOARD_TOPIC})


def handle_leaderboard_unsubscribe(data=None):
    leave_room(LEADERBOARD_TOPIC)
    emit('left', {'room': LEADERBOARD_TOPIC})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = [SOCKET_NAMESPACE]
    if testing:
        namespaces.append('/')
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('leaderboard:subscribe', handle_leaderboard_subscribe, namespace=namespace)
        socketio.on_event('leaderboard:unsubscribe', handle_leaderboard_unsubscribe, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
