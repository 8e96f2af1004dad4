"""Module entrypoint for ``python -m tagchart``."""

from __future__ import annotations

from tagchart.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
