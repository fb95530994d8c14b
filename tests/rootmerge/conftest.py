import os
import pathlib
import stat
from collections.abc import Iterator
from typing import List, Optional

import pytest


@pytest.fixture(scope='session')
def cder():
    class Cder:
        def __init__(self, path: pathlib.Path):
            self.path = path

        def __enter__(self) -> None:
            self.old_cwd = pathlib.Path.cwd()
            os.chdir(self.path)

        def __exit__(self, exc_type, exc_value, traceback) -> None:
            os.chdir(self.old_cwd)

    yield Cder


@pytest.fixture
def cleandir(tmp_path_factory, cder) -> Iterator[pathlib.Path]:
    new_dir = tmp_path_factory.mktemp('cleandir')
    abspath = new_dir.absolute()
    with cder(abspath):
        yield abspath


@pytest.fixture
def inputs_dir(cleandir: pathlib.Path):
    """Factory creating empty files under `cleandir/<name>`."""

    def make(names: List[str], name: str = 'inputs') -> pathlib.Path:
        directory = cleandir / name
        directory.mkdir(parents=True, exist_ok=True)
        for file in names:
            (directory / file).write_text('')
        return directory

    return make


class FakeTool:
    def __init__(self, path: pathlib.Path, record: pathlib.Path, seen: pathlib.Path):
        self.path = path
        self.record = record
        self.seen = seen

    @property
    def called(self) -> bool:
        return self.record.is_file()

    def argv(self) -> List[str]:
        return self.record.read_text().splitlines()

    def seen_list(self) -> str:
        return self.seen.read_text()


@pytest.fixture
def fake_tool(tmp_path: pathlib.Path):
    """Factory for an executable that records its arguments.

    When `list_file` is given, the tool also copies that file aside at the
    moment it runs, so tests can check what it saw.
    """

    def make(
        exitcode: int = 0,
        list_file: Optional[pathlib.Path] = None,
        sleep: Optional[float] = None,
    ) -> FakeTool:
        tool_dir = tmp_path / 'tool'
        tool_dir.mkdir(exist_ok=True)
        path = tool_dir / 'fake-root'
        record = tool_dir / 'argv.txt'
        seen = tool_dir / 'seen.list'
        lines = [
            '#!/bin/sh',
            f'for arg in "$@"; do printf "%s\\n" "$arg"; done > "{record}"',
        ]
        if list_file is not None:
            lines.append(f'cat "{list_file}" > "{seen}"')
        if sleep is not None:
            lines.append(f'sleep {sleep}')
        lines.append(f'exit {exitcode}')
        path.write_text('\n'.join(lines) + '\n')
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return FakeTool(path, record, seen)

    return make
