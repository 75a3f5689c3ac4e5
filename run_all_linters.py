#!/usr/bin/env python3
"""Run formatters, linters and the test suite in one go.

Order:
1. Black format check
2. isort import order check
3. Ruff static checks
4. Pylint static analysis
5. pytest

All output is collected and summarized at the end.
"""

from pathlib import Path
import subprocess
import sys

ROOT = Path(__file__).parent

COMMANDS: list[tuple[list[str], str]] = [
    ([sys.executable, "-m", "black", ".", "--check"], "black"),
    ([sys.executable, "-m", "isort", ".", "--check-only"], "isort"),
    ([sys.executable, "-m", "ruff", "check", "."], "ruff"),
    ([sys.executable, "-m", "pylint", "photo_gallery"], "pylint"),
    ([sys.executable, "-m", "pytest", "-q"], "pytest"),
]


def run_command(cmd: list[str], description: str) -> tuple[bool, str]:
    """Run `cmd` from the project root and return (success, combined output)."""
    print(f"\n{'=' * 60}")
    print(f"{description}: {' '.join(cmd)}")
    print("=" * 60)

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False, cwd=ROOT)
    except OSError as e:
        print(f"FAILED to start: {e}")
        return False, str(e)

    output = result.stdout + result.stderr
    success = result.returncode == 0
    print("ok" if success else "FAILED")
    if output.strip():
        print(output)
    return success, output


def main() -> None:
    results = [(description, *run_command(cmd, description)) for cmd, description in COMMANDS]

    print(f"\n{'=' * 60}")
    print("Summary")
    print("=" * 60)
    for description, success, _ in results:
        print(f"{description}: {'passed' if success else 'FAILED'}")

    sys.exit(0 if all(success for _, success, _ in results) else 1)


if __name__ == "__main__":
    main()
