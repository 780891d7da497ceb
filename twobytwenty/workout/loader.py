"""Workout library files stored locally (TOML/JSON)."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from twobytwenty.workout.errors import LibraryDocumentError
from twobytwenty.workout.library import Diagnostic, LibraryBuilder
from twobytwenty.workout.model import Library

SUPPORTED_SUFFIXES = (".toml", ".json")


def _default_library_dir() -> Path:
    return Path.home() / ".2by20" / "workouts"


def read_document(path: str | Path) -> dict[str, object]:
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix == ".toml":
        return _read_toml(file_path)
    if suffix == ".json":
        return _read_json(file_path)
    raise LibraryDocumentError(
        f"Unsupported library format '{file_path.suffix}'. Use .toml or .json"
    )


def _read_toml(path: Path) -> dict[str, object]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except UnicodeDecodeError as exc:
        raise LibraryDocumentError(f"Invalid UTF-8: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise LibraryDocumentError(f"Invalid TOML: {exc}") from exc
    except ValueError as exc:
        raise LibraryDocumentError(f"Invalid TOML value: {exc}") from exc
    except OSError as exc:
        raise LibraryDocumentError(f"Unable to read {path}: {exc}") from exc


def _read_json(path: Path) -> dict[str, object]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise LibraryDocumentError(f"Invalid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise LibraryDocumentError(f"Invalid JSON: {exc}") from exc
    except ValueError as exc:
        raise LibraryDocumentError(f"Invalid JSON value: {exc}") from exc
    except OSError as exc:
        raise LibraryDocumentError(f"Unable to read {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise LibraryDocumentError("Library JSON must be an object")
    return data


def discover_documents(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(
        file
        for file in directory.iterdir()
        if file.is_file() and file.suffix.lower() in SUPPORTED_SUFFIXES
    )


def load_library_files(paths: Iterable[str | Path]) -> tuple[Library, list[Diagnostic]]:
    """Load the given files in order; unreadable files are reported and skipped."""
    builder = LibraryBuilder()
    for path in paths:
        file_path = Path(path)
        try:
            document = read_document(file_path)
        except LibraryDocumentError as exc:
            builder.report("document", file_path.name, exc)
            continue
        builder.add_document(document, source=file_path.name)
    return builder.build()


def load_library(directory: str | Path | None = None) -> tuple[Library, list[Diagnostic]]:
    root = Path(directory) if directory is not None else _default_library_dir()
    files = discover_documents(root)
    library, diagnostics = load_library_files(files)
    logger.info(
        f"Loaded {len(library.intervals)} interval(s) and {len(library.workouts)} "
        f"workout(s) from {len(files)} file(s) in {root}"
    )
    return library, diagnostics
