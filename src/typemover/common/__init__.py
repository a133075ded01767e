from typemover.needle import L
from .messaging import MessageBus, Renderer, bus

__all__ = ["L", "MessageBus", "Renderer", "bus"]
