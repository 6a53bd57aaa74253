"""FastAPI dependencies for the services living on ``app.state``."""

from fastapi import Request

from scrumkit.services.event_bus import EventBus
from scrumkit.services.event_stream import StreamRegistry
from scrumkit.services.report import TextGenerator


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def get_stream_registry(request: Request) -> StreamRegistry:
    return request.app.state.streams


def get_text_generator(request: Request) -> TextGenerator:
    return request.app.state.text_generator
