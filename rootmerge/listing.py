import glob
import logging
import os
import pathlib
from typing import Callable, List, Optional, Sequence

from rootmerge.exception import ListingError
from rootmerge.utils import PathOrStr

logger = logging.getLogger(__name__)


def check_directory(directory: PathOrStr):
    path = pathlib.Path(directory)
    if not path.exists():
        raise ListingError(
            f'[error]Directory [item]{path}[/item] does not exist.[/error]'
        )
    if not path.is_dir():
        raise ListingError(f'[error][item]{path}[/item] is not a directory.[/error]')
    if not os.access(path, os.R_OK | os.X_OK):
        raise ListingError(
            f'[error]Directory [item]{path}[/item] is not readable.[/error]'
        )


def find_matches(pattern: str, sort: bool = False) -> List[str]:
    """Resolve `pattern` once.

    The returned list is the single source for both the list file and the
    file count handed to the merge tool.
    """
    files = glob.glob(pattern)
    if sort:
        files.sort()
    logger.debug('Pattern %s matched %d file(s).', pattern, len(files))
    return files


def write_list_file(
    path: PathOrStr,
    files: Sequence[str],
    on_entry: Optional[Callable[[str], None]] = None,
) -> pathlib.Path:
    path = pathlib.Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8', errors='surrogateescape') as out:
            for file in files:
                if on_entry is not None:
                    on_entry(file)
                out.write(f'{file}\n')
    except OSError as e:
        raise ListingError(
            f'[error]Could not write list file [item]{path}[/item]: {e.strerror}[/error]'
        ) from e
    logger.debug('Wrote %d entries to %s.', len(files), path)
    return path


def read_list_file(path: PathOrStr) -> List[str]:
    path = pathlib.Path(path)
    try:
        text = path.read_text(encoding='utf-8', errors='surrogateescape')
    except OSError as e:
        raise ListingError(
            f'[error]Could not read list file [item]{path}[/item]: {e.strerror}[/error]'
        ) from e
    return text.splitlines()
