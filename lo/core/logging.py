"""LaraOps log module"""
import sys


class Log:
    """
        Logs messages with colors for different messages
        according to functions
    """
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'

    def error(self, msg, exit=True):
        """
        Logs error into log file and prints it on the console.
        Exits with status 1 unless exit is False.
        """
        print(Log.FAIL + "[ERROR] " + msg + Log.ENDC)
        self.app.log.error(msg)
        if exit:
            sys.exit(1)

    def info(self, msg, end='\n', log=True):
        """
        Logs info messages into log file and prints it on console
        """
        print(Log.OKBLUE + msg + Log.ENDC, end=end)
        if log:
            self.app.log.info(msg)

    def warn(self, msg):
        """
        Logs warning into log file
        """
        print(Log.WARNING + "[WARN] " + msg + Log.ENDC)
        self.app.log.warning(msg)

    def debug(self, msg):
        """
        Logs debug messages into log file
        """
        self.app.log.debug(msg)

    def wait(self, msg, end='\r', log=True):
        """
        Print a step that is still running, overwritten by valide/failed
        """
        print(Log.OKBLUE + msg + " [" + Log.ENDC + ".." + Log.OKBLUE + "]" +
              Log.ENDC, end=end)
        if log:
            self.app.log.info(msg)

    def valide(self, msg, end='\n', log=True):
        print(Log.OKBLUE + msg + " [" + Log.ENDC + Log.OKGREEN + "OK" +
              Log.ENDC + Log.OKBLUE + "]" + Log.ENDC, end=end)
        if log:
            self.app.log.info(msg + " [OK]")

    def failed(self, msg, end='\n', log=True):
        print(Log.OKBLUE + msg + " [" + Log.ENDC + Log.FAIL + "KO" +
              Log.ENDC + Log.OKBLUE + "]" + Log.ENDC, end=end)
        if log:
            self.app.log.info(msg + " [KO]")
