import dataclasses
import enum
import logging
from typing import List, Optional

from rootmerge import console, invocation, listing, pattern, utils
from rootmerge.config import MergeConfig

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    START = 'start'
    PATTERN_BUILT = 'pattern_built'
    LIST_WRITTEN = 'list_written'
    INVOKED = 'invoked'
    SKIPPED = 'skipped'


@dataclasses.dataclass
class MergeResult:
    config: MergeConfig
    pattern: str
    files: List[str]
    invocation: invocation.MergeInvocation
    stage: Stage = Stage.LIST_WRITTEN
    exitcode: Optional[int] = None

    @property
    def count(self) -> int:
        return len(self.files)


def _echo(file: str):
    # Undecodable filename bytes arrive as surrogates; show them as U+FFFD.
    shown = file.encode('utf-8', 'surrogateescape').decode('utf-8', 'replace')
    console.console.print(utils.escape_markup(shown), style='default', soft_wrap=True)


def run_pipeline(
    config: MergeConfig, dry_run: bool = False, echo: bool = True
) -> MergeResult:
    """Scan, write the list file and hand it to the merge tool.

    The directory is checked before anything is written, so a missing scan
    root never leaves a stale list file behind. Matches are enumerated
    exactly once; the count given to the tool is always the number of lines
    in the list file.

    Raises ListingError or ExternalProcessError. When
    `config.replace_process` is set and this is not a dry run, the call
    does not return.
    """
    logger.debug('Stage: %s', Stage.START.value)
    listing.check_directory(config.directory)

    glob_pattern = pattern.build_pattern(config.directory, config.prefix, config.suffix)
    logger.debug('Stage: %s (%s)', Stage.PATTERN_BUILT.value, glob_pattern)

    files = listing.find_matches(glob_pattern, sort=config.sort)
    listing.write_list_file(config.list_file, files, on_entry=_echo if echo else None)
    logger.debug('Stage: %s (%d files)', Stage.LIST_WRITTEN.value, len(files))

    result = MergeResult(
        config=config,
        pattern=glob_pattern,
        files=files,
        invocation=invocation.MergeInvocation(
            count=len(files),
            list_file=config.list_file,
            output_file=config.output_file,
            tool=config.tool,
            tool_args=list(config.tool_args),
            macro=config.macro,
        ),
    )

    if not files and config.skip_empty:
        logger.debug('Stage: %s (no matches)', Stage.SKIPPED.value)
        result.stage = Stage.SKIPPED
        return result
    if dry_run:
        return result

    if config.replace_process:
        invocation.exec_merge(result.invocation)
    result.exitcode = invocation.run_merge(result.invocation, timeout=config.timeout)
    result.stage = Stage.INVOKED
    logger.debug('Stage: %s (exit code %d)', Stage.INVOKED.value, result.exitcode)
    return result
