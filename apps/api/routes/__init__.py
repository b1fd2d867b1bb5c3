from .alerts import router as alerts_router
from .debug import router as debug_router
from .reminders import router as reminders_router
from .settings import router as settings_router
from .timers import router as timers_router

__all__ = [
    "alerts_router",
    "debug_router",
    "reminders_router",
    "settings_router",
    "timers_router",
]
