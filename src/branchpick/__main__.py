"""Module entrypoint for `python -m branchpick`."""

try:
    from .cli import run
except ImportError:
    from branchpick.cli import run


if __name__ == "__main__":
    raise SystemExit(run())
