"""Console script behind `tab-transfer` (copy-tabs, reopen-tabs, check-environment).

Declared under `[project.scripts]`; forces UTF-8 output on Windows before
handing over to `cli.main.run`.
"""

from __future__ import annotations

import sys

# Avoid UnicodeEncodeError on Windows consoles (cp1252) when printing tab titles.
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
