import importlib.resources
import logging
import pathlib
from typing import Any, Dict, List, Optional

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field

from rootmerge import utils
from rootmerge.exception import ConfigError

logger = logging.getLogger(__name__)

_CONFIG_FILE_NAME = 'default_merge_config.yml'


class MergeConfig(BaseModel):
    model_config = ConfigDict(extra='forbid')

    directory: str = Field(
        default='.',
        min_length=1,
        description='Directory scanned for input files.',
    )
    prefix: str = Field(
        default='',
        description='Filename prefix that inputs must start with.',
    )
    suffix: str = Field(
        default='.root',
        description='Filename suffix that inputs must end with. May contain wildcards.',
    )
    list_file: str = Field(
        default='merge.list',
        description='Path of the list file written with one input per line.',
    )
    output_file: str = Field(
        default='merged.root',
        description='Path of the merged artifact produced by the merge macro.',
    )

    tool: str = Field(
        default='root',
        description='Executable that runs the merge macro.',
    )
    tool_args: List[str] = Field(
        default_factory=lambda: ['-b', '-q'],
        description='Arguments passed to the tool before the macro call.',
    )
    macro: str = Field(
        default='MergeFiles.C',
        description='Macro called as <macro>(N, "<list_file>", "<output_file>").',
    )
    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description='Seconds to wait for the tool before giving up.',
    )

    skip_empty: bool = Field(
        default=False,
        description='Do not call the tool when no input matches.',
    )
    sort: bool = Field(
        default=False,
        description='Sort matched inputs instead of keeping filesystem order.',
    )
    replace_process: bool = Field(
        default=False,
        description='Replace the current process with the tool instead of waiting for it.',
    )


def get_default_config_path() -> pathlib.Path:
    with importlib.resources.as_file(
        importlib.resources.files('rootmerge') / 'resources' / _CONFIG_FILE_NAME
    ) as file:
        return file


def _parse(text: str, origin: str) -> MergeConfig:
    try:
        return utils.model_from_yaml(MergeConfig, text)
    except yaml.YAMLError as e:
        raise ConfigError(
            f'[error]Config [item]{origin}[/item] is not valid YAML.[/error]'
        ) from e
    except TypeError as e:
        raise ConfigError(
            f'[error]Config [item]{origin}[/item] must be a mapping of options.[/error]'
        ) from e
    except pydantic.ValidationError as e:
        raise ConfigError(
            f'[error]Config [item]{origin}[/item] is invalid:[/error]\n'
            f'{utils.escape_markup(str(e))}'
        ) from e


def get_default_config() -> MergeConfig:
    path = get_default_config_path()
    return _parse(path.read_text(), str(path))


def load_config(path: pathlib.Path) -> MergeConfig:
    logger.debug('Loading config from %s.', path)
    try:
        text = path.read_text()
    except OSError as e:
        raise ConfigError(
            f'[error]Could not read config [item]{path}[/item]: {e.strerror}[/error]'
        ) from e
    return _parse(text, str(path))


def merge_overrides(
    config: MergeConfig, overrides: Dict[str, Any]
) -> MergeConfig:
    """Apply non-None `overrides` on top of `config`, validating the result."""
    updates = {k: v for k, v in overrides.items() if v is not None}
    if not updates:
        return config
    logger.debug('Overriding config keys: %s.', ', '.join(sorted(updates)))
    try:
        return MergeConfig(**{**config.model_dump(), **updates})
    except pydantic.ValidationError as e:
        raise ConfigError(
            f'[error]Invalid options:[/error]\n{utils.escape_markup(str(e))}'
        ) from e


def resolve_config(
    path: Optional[pathlib.Path] = None, **overrides: Any
) -> MergeConfig:
    config = load_config(path) if path is not None else get_default_config()
    return merge_overrides(config, overrides)


def write_default_config(path: pathlib.Path):
    try:
        utils.create_and_write(path, get_default_config_path().read_text())
    except OSError as e:
        raise ConfigError(
            f'[error]Could not write config [item]{path}[/item]: {e.strerror}[/error]'
        ) from e
