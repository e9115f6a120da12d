import threading


class EventSource(object):
    """
    A list of handlers that are each called when an event is fired.
    Handlers may be added or removed from any thread; a fire in progress
    calls the handlers that were registered when it started.
    """

    def __init__(self):
        self._handlers = []
        self._lock = threading.Lock()

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def __len__(self):
        return len(self._handlers)

    def add(self, handler):
        with self._lock:
            self._handlers = self._handlers + [handler]
        return self

    def remove(self, handler):
        with self._lock:
            if handler in self._handlers:
                handlers = list(self._handlers)
                handlers.remove(handler)
                self._handlers = handlers
        return self

    def handlers(self):
        return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        for handler in self._handlers:
            handler(*args, **kwargs)
