"""Nox sessions for avsh."""

from __future__ import annotations

import shutil
from pathlib import Path

import nox

nox.options.default_venv_backend = "uv"
nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = ["lint", "type_check", "tests"]

PYTHON_VERSIONS = ["3.11", "3.12"]
PYTHON_DEFAULT = "3.11"

SRC_DIR = "src"
TESTS_DIR = "tests"
PYTHON_PATHS = [SRC_DIR, TESTS_DIR, "noxfile.py"]


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the test suite with pytest.

    Usage:
        nox -s tests                          # Run on all Python versions
        nox -s tests -- -k test_parsed_config # Run specific tests
    """
    session.install("-e", ".[test]")
    session.run(
        "pytest",
        "--cov=avsh",
        "--cov-report=term-missing",
        *session.posargs,
    )


@nox.session(python=PYTHON_DEFAULT)
def lint(session: nox.Session) -> None:
    """Run ruff linting checks.

    Usage:
        nox -s lint            # Check for linting issues
        nox -s lint -- --fix   # Auto-fix issues
    """
    session.install("ruff")
    session.run("ruff", "check", *PYTHON_PATHS, *session.posargs)


@nox.session(name="format", python=PYTHON_DEFAULT)
def format_(session: nox.Session) -> None:
    """Format code with ruff.

    Usage:
        nox -s format             # Check formatting (CI mode)
        nox -s format -- --write  # Apply formatting
    """
    session.install("ruff")

    if "--write" in session.posargs:
        session.run("ruff", "check", "--select", "I", "--fix", *PYTHON_PATHS)
        session.run("ruff", "format", *PYTHON_PATHS)
    else:
        session.run("ruff", "check", "--select", "I", *PYTHON_PATHS)
        session.run("ruff", "format", "--check", *PYTHON_PATHS)


@nox.session(python=PYTHON_DEFAULT)
def type_check(session: nox.Session) -> None:
    """Run mypy type checking."""
    session.install("mypy", "types-paramiko", "types-PyYAML")
    session.install("-e", ".")
    session.run("mypy", f"{SRC_DIR}/avsh", *session.posargs)


@nox.session(python=PYTHON_DEFAULT)
def build(session: nox.Session) -> None:
    """Build distribution packages (wheel and sdist) into dist/."""
    session.install("build")

    dist_dir = Path("dist")
    if dist_dir.exists():
        shutil.rmtree(dist_dir)

    session.run("python", "-m", "build")
    session.log(f"Packages built in {dist_dir}/")


@nox.session(python=False)
def clean(session: nox.Session) -> None:
    """Remove build artifacts and cache directories."""
    for pattern in ["build", "dist", "src/*.egg-info", ".pytest_cache", ".mypy_cache",
                    ".ruff_cache", ".coverage", ".nox"]:
        for path in Path().glob(pattern):
            session.log(f"Removing {path}")
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()

    for pycache in Path().rglob("__pycache__"):
        shutil.rmtree(pycache)
