import logging
import threading

logger = logging.getLogger(__name__)


class BackgroundLoop:
    """ Continually runs the loop() template method on a background daemon thread.

        startup() runs once before the loop and shutdown() once after it, whatever the
        outcome. The loop ends when stop_event is set, when loop() returns False or when
        startup() or loop() raises. The event is only checked between calls to loop().
        Exceptions are passed to exception_handler().
    """

    def __init__(self, name=None, log=logger):
        """
        :param name: the name given to the background thread
        :param log: the logger receiving exceptions raised by the loop
        """
        self.name = name
        self.stop_event = threading.Event()
        self.background_thread = None
        self.logger = log
        self._start_lock = threading.Lock()

    def start(self):
        """
        Starts the background thread. Calling start() again has no effect.
        """
        with self._start_lock:
            if self.background_thread is None:
                t = threading.Thread(target=self._run, name=self.name, daemon=True)
                self.background_thread = t
                t.start()

    def exception_handler(self, e):
        self.logger.exception(e)

    def _run(self):
        """ The processing loop for the background thread. """
        try:
            if self._do(self.startup):
                while self.running() and self._do(self.loop):
                    pass
        finally:
            self._do(self.shutdown)
            self.logger.debug("background thread %s exiting" % self.name)

    def _do(self, callme):
        """ runs a template method and captures any exceptions
            :return: False if the method failed or asked to stop, True otherwise
        """
        try:
            return callme() is not False
        except Exception as e:
            self.exception_handler(e)
            return False

    def startup(self):
        """ template method called when the thread starts. Return False to skip the loop. """

    def loop(self):
        """ template method called repeatedly. Return False to stop. """
        return False

    def shutdown(self):
        """ template method called when the thread exits """

    def running(self):
        return not self.stop_event.is_set()
