"""Exception hierarchy shared by commands, ports and the runtime."""


class TermideError(Exception):
    """Base class for termide errors."""


class UnknownCommandError(TermideError):
    """A command identifier or command-line alias did not resolve."""

    def __init__(self, name: str):
        super().__init__(f"Unknown command: {name}")
        self.name = name


class CommandFailedError(TermideError):
    """A command body raised; the original exception is chained as __cause__."""

    def __init__(self, command_id: str, message: str):
        super().__init__(f"Command {command_id} failed: {message}")
        self.command_id = command_id


class ProcessSpawnError(TermideError):
    """A child process or PTY could not be launched."""

    def __init__(self, command: str, message: str):
        super().__init__(f"Failed to spawn {command!r}: {message}")
        self.command = command


class SettingsError(TermideError):
    """Unknown settings key or a value that does not validate."""
