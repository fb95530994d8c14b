import dataclasses
import logging
import os
import shlex
import subprocess
import sys
from typing import List, NoReturn, Optional

from rootmerge.exception import ExternalProcessError

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


def _quote_macro_string(s: str) -> str:
    escaped = s.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


@dataclasses.dataclass(frozen=True)
class MergeInvocation:
    count: int
    list_file: str
    output_file: str
    tool: str = 'root'
    tool_args: List[str] = dataclasses.field(default_factory=lambda: ['-b', '-q'])
    macro: str = 'MergeFiles.C'

    def macro_call(self) -> str:
        return (
            f'{self.macro}({self.count}, '
            f'{_quote_macro_string(self.list_file)}, '
            f'{_quote_macro_string(self.output_file)})'
        )

    def argv(self) -> List[str]:
        return [self.tool, *self.tool_args, self.macro_call()]

    def command_line(self) -> str:
        return shlex.join(self.argv())


def run_merge(invocation: MergeInvocation, timeout: Optional[float] = None) -> int:
    argv = invocation.argv()
    command = invocation.command_line()
    logger.debug('Running %s (timeout=%s).', command, timeout)
    try:
        completed = subprocess.run(argv, timeout=timeout)
    except (FileNotFoundError, PermissionError) as e:
        raise ExternalProcessError(
            f'[error]Could not start [item]{invocation.tool}[/item]: {e.strerror}[/error]',
            EXIT_NOT_FOUND,
            argv,
        ) from e
    except subprocess.TimeoutExpired as e:
        raise ExternalProcessError(
            f'[error]Merge did not finish within {timeout} seconds.[/error]',
            EXIT_TIMEOUT,
            argv,
        ) from e
    logger.debug('%s exited with code %d.', invocation.tool, completed.returncode)
    if completed.returncode < 0:
        raise ExternalProcessError(
            f'[error][item]{invocation.tool}[/item] was killed by signal '
            f'{-completed.returncode}.[/error]',
            128 - completed.returncode,
            argv,
        )
    if completed.returncode != 0:
        raise ExternalProcessError(
            f'[error][item]{invocation.tool}[/item] exited with code '
            f'{completed.returncode}.[/error]',
            completed.returncode,
            argv,
        )
    return completed.returncode


def exec_merge(invocation: MergeInvocation) -> NoReturn:
    argv = invocation.argv()
    logger.debug('Replacing process with %s.', invocation.command_line())
    # Buffered output is lost once the process image is replaced.
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execvp(argv[0], argv)
    except (FileNotFoundError, PermissionError) as e:
        raise ExternalProcessError(
            f'[error]Could not start [item]{invocation.tool}[/item]: {e.strerror}[/error]',
            EXIT_NOT_FOUND,
            argv,
        ) from e
