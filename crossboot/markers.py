"""Persistent completion markers, one JSON record per step.

    markers/
      binutils.json       {"step": "binutils", "completed_at": "...", "duration": 812.4}
      gcc-stage1.json

Presence of ``<name>.json`` means the step completed successfully; nothing
else about the record affects scheduling. Records are written to a
temporary file, fsync'd and renamed into place, so a crash can never leave
a half-written marker that would be mistaken for completion.
"""

import json
import os
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path


def valid_step_name(step: str) -> bool:
    """True if step can name a marker file inside the store directory."""
    return bool(step) and "/" not in step and not step.startswith(".")


@dataclass(frozen=True)
class Marker:
    step: str
    completed_at: str
    duration: float


class MarkerStore:
    """Directory of completion records keyed by step name."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path(self, step: str) -> Path:
        if not valid_step_name(step):
            raise ValueError(f"invalid step name for a marker: {step!r}")
        return self.root / f"{step}.json"

    def is_done(self, step: str) -> bool:
        return self.path(step).exists()

    def mark(self, step: str, duration: float = 0.0) -> Marker:
        """Durably record that step completed."""
        marker = Marker(
            step=step,
            completed_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            duration=round(duration, 3),
        )
        dest = self.path(step)
        self.root.mkdir(parents=True, exist_ok=True)
        tmp = dest.with_name(f".{dest.name}.tmp-{time.time_ns()}")
        with open(tmp, "w") as f:
            json.dump(asdict(marker), f, sort_keys=True)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, dest)
        self._sync_dir()
        return marker

    def get(self, step: str) -> Marker | None:
        """Read a step's record, or None if it has not completed.

        A record that exists but cannot be parsed still counts as done (the
        file's existence is what matters), so its fields are filled blank.
        """
        p = self.path(step)
        try:
            data = json.loads(p.read_text())
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            return Marker(step=step, completed_at="", duration=0.0)
        return Marker(
            step=data.get("step", step),
            completed_at=data.get("completed_at", ""),
            duration=float(data.get("duration", 0.0)),
        )

    def forget(self, step: str) -> bool:
        """Delete a step's marker. Returns True if one existed."""
        try:
            self.path(step).unlink()
        except FileNotFoundError:
            return False
        return True

    def completed(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))

    def _sync_dir(self) -> None:
        fd = os.open(self.root, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
