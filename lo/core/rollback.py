"""Rollback ledger for the install run"""
import os

from lo.core.fileutils import LOFileUtils
from lo.core.logging import Log
from lo.core.services import LOService


def _remove(controller, path):
    LOFileUtils.rm(controller, path)


def _empty(controller, path):
    if os.path.isdir(path):
        LOFileUtils.empty_dir(controller, path)


def _restore(controller, path, backup):
    LOFileUtils.mvfile(controller, backup, path)


def _reload(controller, service):
    if not LOService.reload_service(controller, service):
        raise RuntimeError("{0} reload failed".format(service))


class RollbackLedger:
    """Undo actions recorded as steps succeed, replayed in reverse order.

    Only actions performed by the installer itself are recorded: packages
    and databases are never rolled back.
    """

    def __init__(self):
        self._actions = []

    def __len__(self):
        return len(self._actions)

    @property
    def descriptions(self):
        return [description for description, _, _ in self._actions]

    def record(self, description, undo, *args):
        """undo is called as undo(controller, *args)"""
        self._actions.append((description, undo, args))

    def created_directory(self, path):
        self.record("remove directory {0}".format(path), _remove, path)

    def populated_directory(self, path):
        self.record("empty directory {0}".format(path), _empty, path)

    def created_file(self, path):
        self.record("remove {0}".format(path), _remove, path)

    def backed_up(self, path, backup):
        self.record("restore {0} from {1}".format(path, backup),
                    _restore, path, backup)

    def reload_service(self, service):
        self.record("reload {0}".format(service), _reload, service)

    def rollback(self, controller):
        """Replay every undo action, newest first.

        Failures are logged and skipped. Returns the number of failed
        actions and clears the ledger.
        """
        failures = 0
        Log.warn(controller, "Rollback triggered")
        while self._actions:
            description, undo, args = self._actions.pop()
            try:
                Log.debug(controller, "rollback: {0}".format(description))
                undo(controller, *args)
            except Exception as e:
                failures += 1
                Log.warn(controller, "Rollback step failed ({0}): {1}"
                         .format(description, e))
        if failures:
            Log.warn(controller, "Rollback completed with {0} failed step(s)"
                     .format(failures))
        else:
            Log.warn(controller, "Rollback completed")
        return failures
