"""Socket.IO server for real-time timeline updates."""

from typing import Any

import socketio

from worldline.logging import get_logger

logger = get_logger('realtime')

sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*'
)


@sio.event
async def connect(sid, environ):
    query_string = environ.get('QUERY_STRING', '')
    if 'projectId=' in query_string:
        project_id = query_string.split('projectId=')[-1].split('&')[0]
        await sio.enter_room(sid, project_id)
        logger.debug(f"Client {sid[:8]}... joined project room: {project_id[:8]}...")


@sio.event
async def disconnect(sid):
    logger.debug(f"Client {sid[:8]}... disconnected")


async def notify_timeline_event(project_id: str, payload: dict[str, Any]) -> None:
    """Push a changed timeline event to every client watching the project."""
    await sio.emit('timeline_event_updated', payload, room=project_id)
