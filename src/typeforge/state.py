"""On-disk digests of rendered artifacts.

Each module keeps a ``<name>.state`` file beside its artifacts listing one
``<sha256> *<file name>`` line per artifact written by the previous run.
An artifact whose new digest matches the recorded one is left untouched so
that build tools do not see a fresh timestamp.
"""

from __future__ import annotations

import os


class RenderState:
    def __init__(self, path: str):
        self.path = path
        self.previous: dict[str, str] = {}
        self.current: dict[str, str] = {}
        if os.path.exists(path):
            with open(path, encoding="utf-8") as f:
                for line in f:
                    recorded, sep, file_name = line.rstrip("\n").partition(" *")
                    if sep:
                        self.previous[file_name] = recorded

    def unchanged(self, file_name: str, file_digest: str) -> bool:
        return self.previous.get(file_name) == file_digest

    def record(self, file_name: str, file_digest: str):
        self.current[file_name] = file_digest

    def stale(self) -> list[str]:
        """Artifacts of the previous run that the current run did not produce."""
        return sorted(set(self.previous) - set(self.current))

    def save(self):
        temporary = self.path + "~"
        with open(temporary, "w", encoding="utf-8", newline="\n") as f:
            for file_name in sorted(self.current):
                f.write(f"{self.current[file_name]} *{file_name}\n")
        os.replace(temporary, self.path)
