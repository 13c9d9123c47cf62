from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, bytes], str]:
    def _write(name: str, data: bytes) -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _write
