from __future__ import annotations

import sys

try:
    # Normal package import path.
    from .cli import main as _cli_main
except ImportError:
    # Script entrypoint path.
    from termstat_app.cli import main as _cli_main

_COMMANDS = ("run", "doctor")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        return int(_cli_main(["run"]))
    if args[0] not in _COMMANDS and args[0] not in ("-h", "--help"):
        # Bare flags such as `termstat -i 500` belong to `run`.
        return int(_cli_main(["run", *args]))
    return int(_cli_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
