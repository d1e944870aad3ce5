"""Single instance lock"""
import fcntl
import os

from lo.core.exc import InstallerLocked
from lo.core.logging import Log


class LOLock():
    """Exclusive, non blocking lock on a file held for a whole run.

        with LOLock(controller, '/var/lock/laraops.lock'):
            ...
    """

    def __init__(self, controller, path):
        self.controller = controller
        self.path = path
        self._handle = None

    def acquire(self):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        handle = open(self.path, 'a+', encoding='utf-8')
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            handle.close()
            raise InstallerLocked(
                "another installer run holds {0}".format(self.path))
        handle.seek(0)
        handle.truncate()
        handle.write(str(os.getpid()))
        handle.flush()
        self._handle = handle
        Log.debug(self.controller, "acquired lock {0}".format(self.path))

    def release(self):
        if self._handle is None:
            return
        fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        self._handle.close()
        self._handle = None
        Log.debug(self.controller, "released lock {0}".format(self.path))

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()
        return False
