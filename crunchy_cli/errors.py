class CrunchyCliError(Exception):
    pass


class ConfigurationError(CrunchyCliError):
    """Raised while setting up the shared client, before any command runs."""


class CommandError(CrunchyCliError):
    """An expected failure of a command. Reported as a single error line."""


class CancelledError(CrunchyCliError):
    """The operation was aborted on purpose, e.g. by the user."""

    def __init__(self, msg: str = "operation was cancelled"):
        super().__init__(msg)
