"""Error types for login verification and remediation."""


class LoginGuardError(Exception):
    """Base class for all login guard errors."""


class ConfigError(LoginGuardError):
    """Required configuration is missing or invalid."""


class NetworkError(LoginGuardError):
    """The messaging backend could not be reached or rejected a request."""


class GenerationError(LoginGuardError):
    """Key pair or password generation failed."""


class AccountError(LoginGuardError):
    """An account-mutating step failed."""


class HardAccountError(AccountError):
    """Account failure that aborts the remaining remediation steps."""


class SoftAccountError(AccountError):
    """Account failure that is logged and tolerated."""
