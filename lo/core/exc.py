"""LaraOps exception classes."""


class LOError(Exception):
    """Generic errors."""

    def __init__(self, msg):
        Exception.__init__(self)
        self.msg = msg

    def __str__(self):
        return self.msg


class PreconditionError(LOError):
    """Host is not fit to run the installer."""
    pass


class InsufficientPrivilege(PreconditionError):
    pass


class NoConnectivity(PreconditionError):
    pass


class InstallerLocked(PreconditionError):
    """Another installer run holds the lock file."""
    pass


class ValidationError(LOError):
    """Operator supplied an invalid value."""

    def __init__(self, field, reason):
        LOError.__init__(self, f"{field}: {reason}")
        self.field = field
        self.reason = reason


class InstallError(LOError):
    """Package stack installation failed."""
    pass


class StackVerificationFailed(InstallError):
    pass


class DatabaseError(LOError):
    pass


class MaterializeError(LOError):
    """Project directory could not be populated."""
    pass


class DirectoryNotEmpty(MaterializeError):
    pass


class ScaffoldFailed(MaterializeError):
    pass


class CloneFailed(MaterializeError):
    pass


class DependencyResolutionFailed(MaterializeError):
    pass


class ConfigError(LOError):
    pass


class KeyGenerationFailed(ConfigError):
    pass


class MigrationError(LOError):
    pass


class PublishError(LOError):
    pass


class SiteAlreadyExists(PublishError):
    pass


class ConfigValidationFailed(PublishError):
    pass


class ReloadFailed(PublishError):
    pass


class AdminPanelError(LOError):
    pass
