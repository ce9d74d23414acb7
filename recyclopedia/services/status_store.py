import threading
from dataclasses import dataclass, field
from typing import List

MAX_LOGS = 200


@dataclass
class StatusStore:
    requests: int = 0
    failures: int = 0
    logs: List[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def log(self, msg: str):
        with self._lock:
            self.logs.append(msg)
            if len(self.logs) > MAX_LOGS:
                self.logs = self.logs[-MAX_LOGS:]

    def count(self, ok: bool):
        with self._lock:
            self.requests += 1
            if not ok:
                self.failures += 1

    def snapshot(self) -> List[str]:
        with self._lock:
            return list(self.logs)
