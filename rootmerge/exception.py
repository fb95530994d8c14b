from typing import Optional, Sequence

from rootmerge import console


class RootMergeException(RuntimeError):
    """Base class for every error that should abort a merge.

    Messages are rendered through a private themed console, so they may use
    the markup tags from `rootmerge.console.theme`. The rendered text is what
    `str()` returns.
    """

    exitcode: int = 1

    def __init__(self, message: Optional[str] = None):
        super().__init__()
        self.msg = []
        self.console = console.new_console()
        if message is not None:
            self.print(message)

    def print(self, *args, **kwargs):
        kwargs.setdefault('soft_wrap', True)
        with self.console.capture() as capture:
            self.console.print(*args, **kwargs)
        self.msg.append(capture.get())

    def __str__(self) -> str:
        if not self.msg:
            return ''
        return ''.join(self.msg)


class ListingError(RootMergeException, IOError):
    """Scan directory or list file could not be accessed."""


class ConfigError(RootMergeException):
    pass


class ExternalProcessError(RootMergeException):
    """The merge tool is missing, failed, or timed out.

    `exitcode` is the tool's own exit status when it ran, 127 when it could
    not be started and 124 when it was killed after a timeout.
    """

    def __init__(
        self,
        message: str,
        exitcode: int,
        command: Optional[Sequence[str]] = None,
    ):
        super().__init__(message)
        self.exitcode = exitcode
        self.command = list(command) if command is not None else None
