import pathlib
import re
from typing import Type, TypeVar, Union

import rich.markup
import yaml
from pydantic import BaseModel

from rootmerge import __version__

T = TypeVar('T', bound=BaseModel)
PathOrStr = Union[pathlib.Path, str]


def get_version() -> str:
    return __version__.__version__


def create_and_write(path: pathlib.Path, *args, **kwargs):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(*args, **kwargs)


def escape_markup(s: str) -> str:
    return rich.markup.escape(s, _escape=re.compile(r'(\\*)(\[)').sub)


def model_json(model: BaseModel) -> str:
    return model.model_dump_json(indent=4, exclude_none=True)


def model_from_yaml(model: Type[T], s: str) -> T:
    return model(**(yaml.safe_load(s) or {}))
