from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure() -> None:
    # Keep `import voicecall...` and the `utils` test helpers importable when
    # running `pytest` from the repo root.
    tests_dir = Path(__file__).resolve().parent
    for path in (str(tests_dir), str(tests_dir.parent)):
        if path not in sys.path:
            sys.path.insert(0, path)
