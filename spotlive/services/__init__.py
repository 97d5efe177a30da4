from .live_conditions import LiveConditionsOrchestrator, system_clock

__all__ = ["LiveConditionsOrchestrator", "system_clock"]
