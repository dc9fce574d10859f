# Copyright (c) Syntropy Systems
"""Pytest fixtures for gradewatch tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Store original cwd at module load time
_original_cwd = Path.cwd()

FIXED_TIME = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)

TRANSCRIPT_HTML = """
<html>
  <body>
    <h2 class="table-title">Achievements</h2>
    <table id="results">
      <thead>
        <tr><th>Kurs</th><th>Kursnamn</th><th>Högskolepoäng (hp)</th><th>Resultat</th></tr>
      </thead>
      <tbody>
        <tr><td>TDA001</td><td>Programmering</td><td>7,5 hp</td><td>5</td></tr>
        <tr><td>TDA002</td><td>Diskret matematik</td><td>7,5 hp</td><td>G</td></tr>
        <tr><td>TDA003</td><td>Datastrukturer</td><td></td><td>4</td></tr>
      </tbody>
    </table>
  </body>
</html>
"""

EMPTY_PAGE_HTML = "<html><body><div id='app'></div></body></html>"


def transcript_table(*rows: tuple[str, str, str, str]) -> str:
    """Build a transcript table with the given (code, name, credits, grade) rows."""
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    return (
        "<table><thead><tr><th>Course</th><th>Course name</th>"
        "<th>Credits</th><th>Grade</th></tr></thead>"
        f"<tbody>{body}</tbody></table>"
    )


@dataclass
class FakeTimer:
    """Handle returned by FakeScheduler.call_later."""

    due: float
    callback: Callable[[], object]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeScheduler:
    """Manually advanced clock for debounce tests."""

    now: float = 0.0
    timers: list[FakeTimer] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], object]) -> FakeTimer:
        timer = FakeTimer(due=self.now + delay, callback=callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        """Move time forward, firing every timer that falls due."""
        target = self.now + seconds
        while True:
            due = [t for t in self.active if t.due <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = max(self.now, timer.due)
            self.timers.remove(timer)
            timer.callback()
        self.now = target


@pytest.fixture
def scheduler() -> FakeScheduler:
    """A scheduler that only fires when advanced."""
    return FakeScheduler()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns FIXED_TIME."""
    return lambda: FIXED_TIME


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_dir(temp_dir: Path) -> Generator[Path, None, None]:
    """Temporary working directory with a saved transcript page."""
    (temp_dir / "transcript.html").write_text(TRANSCRIPT_HTML, encoding="utf-8")

    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)
