from .context import WatchContext
from .debounce import EventDebouncer
from .loop import WatchLoop, WriteEventHandler

__all__ = ["EventDebouncer", "WatchContext", "WatchLoop", "WriteEventHandler"]
