from webmarker.infrastructure.messaging.event_bus import EventBus

__all__ = ["EventBus"]
