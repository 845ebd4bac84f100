from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.event_processors.factory import EventProcessorFactory

__all__ = ["BaseEventProcessor", "EventProcessorFactory"]
