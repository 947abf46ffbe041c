import os
import tempfile
import time
from pathlib import Path

import yaml


class YamlStateStore:
    """
    Durable string key-value state kept in a YAML file.

    The file is re-read on every access and rewritten on every change, so
    state survives between invocations of the job.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def get(self, key: str):
        return self._load().get(key)

    def set(self, key: str, value):
        data = self._load()
        data[key] = str(value)
        self._dump(data)

    def delete(self, key: str):
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as f:
            data = yaml.safe_load(f)
        return data or {}

    def _dump(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write next to the state file and swap it in, a killed write never truncates it
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class FollowUpScheduler:
    """Records when the next run of the job should happen."""

    NEXT_RUN_KEY = "image_generation_service_next_run"

    def __init__(self, state_store: YamlStateStore, clock=time.time, delay_seconds: int = 60):
        self.state_store = state_store
        self.clock = clock
        self.delay_seconds = delay_seconds

    def schedule_follow_up(self):
        self.state_store.set(self.NEXT_RUN_KEY, self.clock() + self.delay_seconds)

    def cancel_pending_follow_up(self):
        self.state_store.delete(self.NEXT_RUN_KEY)

    def pending_follow_up(self):
        """Epoch seconds of the scheduled run, or None."""
        value = self.state_store.get(self.NEXT_RUN_KEY)
        return float(value) if value is not None else None

    def is_follow_up_due(self) -> bool:
        next_run = self.pending_follow_up()
        return next_run is not None and self.clock() >= next_run
