from __future__ import annotations

import sys
from typing import Optional

# Absolute imports so `python -m worldforge` and the console script behave alike
from worldforge.cli import main as cli_main


def main(argv: Optional[list[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        argv = ["info"]
    cli_main(argv)


if __name__ == "__main__":
    main()
