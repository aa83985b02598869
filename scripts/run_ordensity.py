"""Wrapper for the ORdensity run CLI."""

from __future__ import annotations

from ordensity.cli import run_main

if __name__ == "__main__":
    raise SystemExit(run_main())
