"""Custom exceptions for the propolis zone brand."""


class BrandError(RuntimeError):
    """Raised on unrecoverable configuration or runtime errors."""


class UsageError(BrandError):
    """A hook was invoked with missing or invalid arguments."""


class ConfigError(BrandError):
    """Brand configuration could not be resolved."""


class ResourceStagingError(BrandError):
    """Copying the hypervisor binary or writing its config failed."""


class NetworkResourceError(BrandError):
    """A VNIC could not be queried, created or deleted."""


class SupervisorFatalError(BrandError):
    """The guest hypervisor cannot be started."""


class BinaryNotExecutable(SupervisorFatalError):
    """The hypervisor binary is missing or lacks execute permission."""


class SupervisorCleanupError(BrandError):
    """Signalling or querying the supervised process failed."""
