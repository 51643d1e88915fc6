"""Runs the tab-transfer CLI from a checkout without installing it.

`python -m main copy-tabs android tabs.json` behaves like the installed
`tab-transfer` command. The packages live in `src/`, so this puts `src/` on
`sys.path` before importing `cli.main`.
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
    project_root = Path(__file__).resolve().parent
    src = project_root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
