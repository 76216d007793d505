"""WebSocket URL routing for ShiftBoard Channels consumers."""

from django.urls import re_path

from core.consumers import BoardConsumer

websocket_urlpatterns = [
    # Board session: gestures in, transitions and change notices out
    re_path(r"ws/board/$", BoardConsumer.as_asgi()),
]
