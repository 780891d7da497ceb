"""Interval and workout library built from one or more definition documents."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Literal

from loguru import logger

from twobytwenty.workout.errors import DuplicateName, MalformedRecord, WorkoutDefinitionError
from twobytwenty.workout.intervals import parse_interval
from twobytwenty.workout.model import IntervalTemplate, Library, WorkoutTemplate
from twobytwenty.workout.workouts import resolve_workout

EntryKind = Literal["document", "interval", "workout"]
Document = Mapping[str, object]


@dataclass(frozen=True)
class Diagnostic:
    """An entry that was skipped while building the library."""

    kind: EntryKind
    source: str
    error: WorkoutDefinitionError
    index: int | None = None
    name: str | None = None

    def __str__(self) -> str:
        where = self.source
        if self.index is not None:
            where += f" {self.kind}s[{self.index}]"
        if self.name:
            where += f" '{self.name}'"
        return f"{where}: {self.error}"


class LibraryBuilder:
    """Collects intervals and workouts document by document.

    A document's intervals are all registered before its workouts are resolved,
    and workouts only see intervals registered so far, so documents must be
    added in dependency order. The first definition of a name wins.
    """

    def __init__(self) -> None:
        self._intervals: dict[str, IntervalTemplate] = {}
        self._workouts: dict[str, WorkoutTemplate] = {}
        self._diagnostics: list[Diagnostic] = []
        self._document_count = 0

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._diagnostics)

    def add_document(self, document: object, source: str | None = None) -> None:
        self._document_count += 1
        label = source or f"document {self._document_count}"
        if not isinstance(document, Mapping):
            self.report("document", label, MalformedRecord("Document must be a table"))
            return

        for index, raw in enumerate(self._section(document, "intervals", label)):
            self._add_interval(raw, label, index)
        for index, raw in enumerate(self._section(document, "workouts", label)):
            self._add_workout(raw, label, index)

    def report(
        self,
        kind: EntryKind,
        source: str,
        error: WorkoutDefinitionError,
        *,
        index: int | None = None,
        name: str | None = None,
    ) -> None:
        diagnostic = Diagnostic(kind=kind, source=source, error=error, index=index, name=name)
        logger.warning(f"Skipped {kind}: {diagnostic}")
        self._diagnostics.append(diagnostic)

    def build(self) -> tuple[Library, list[Diagnostic]]:
        library = Library(intervals=self._intervals, workouts=self._workouts)
        return library, list(self._diagnostics)

    def _section(self, document: Document, key: str, source: str) -> list[object]:
        section = document.get(key)
        if section is None:
            return []
        if not isinstance(section, list):
            self.report("document", source, MalformedRecord(f"'{key}' must be an array of tables"))
            return []
        return section

    def _add_interval(self, raw: object, source: str, index: int) -> None:
        name = _entry_name(raw)
        try:
            template = parse_interval(raw)
            if not template.name:
                raise MalformedRecord("Library intervals must have a name")
            if template.name in self._intervals:
                raise DuplicateName(template.name)
        except WorkoutDefinitionError as exc:
            self.report("interval", source, exc, index=index, name=name)
            return
        self._intervals[template.name] = template
        logger.debug(f"Registered interval '{template.name}' ({template.duration}) from {source}")

    def _add_workout(self, raw: object, source: str, index: int) -> None:
        name = _entry_name(raw)
        try:
            workout = resolve_workout(raw, self._intervals)
            if workout.name in self._workouts:
                raise DuplicateName(workout.name)
        except WorkoutDefinitionError as exc:
            self.report("workout", source, exc, index=index, name=name)
            return
        self._workouts[workout.name] = workout
        logger.debug(f"Registered workout '{workout.name}' ({workout.duration}) from {source}")


def _entry_name(raw: object) -> str | None:
    if isinstance(raw, Mapping):
        name = raw.get("name")
        if isinstance(name, str):
            return name.strip()
    return None


def build_library(
    documents: Iterable[Document | tuple[str, Document]],
) -> tuple[Library, list[Diagnostic]]:
    """Build a library from documents given in dependency order.

    Each item is either a document or a ``(source, document)`` pair; the source
    labels diagnostics.
    """
    builder = LibraryBuilder()
    for item in documents:
        if isinstance(item, tuple):
            source, document = item
            builder.add_document(document, source=source)
        else:
            builder.add_document(item)
    return builder.build()
