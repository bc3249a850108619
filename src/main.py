"""Entry point: research | clarify | status."""

import sys

from src.observability import flush

USAGE = (
    "Usage: python -m src.main research <query> [--identity ID]\n"
    "       python -m src.main clarify <query> <clarification> [--identity ID]\n"
    "       python -m src.main status"
)


def _split_identity(argv: list[str]) -> tuple[list[str], str | None]:
    identity = None
    rest: list[str] = []
    i = 0
    while i < len(argv):
        if argv[i] == "--identity" and i + 1 < len(argv):
            identity = argv[i + 1]
            i += 2
            continue
        rest.append(argv[i])
        i += 1
    return rest, identity


def main():
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    mode = sys.argv[1].lower()
    args, identity = _split_identity(sys.argv[2:])

    if mode in ("research", "clarify", "status"):
        from src.interfaces.oneshot import main as run_oneshot_main

        if mode == "research" and not args:
            query = sys.stdin.read().strip()
            args = [query] if query else []
        code = run_oneshot_main(mode, args, identity=identity)
        flush()
        sys.exit(code)

    print(f"Unknown mode: {mode}")
    print(USAGE)
    sys.exit(1)


if __name__ == "__main__":
    main()
