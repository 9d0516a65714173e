"""
Bug Pattern Model
=================
A named defect signature plus the guard signature that exempts it.

A pattern is *found* in an artifact when its detection regex matches and
none of its protection substrings appear anywhere in the text.
"""
import re
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BugPattern:
    name: str
    detection: re.Pattern
    protection: Tuple[str, ...]
    critical: bool = False

    def detects(self, text: str) -> bool:
        return bool(self.detection.search(text))

    def is_protected(self, text: str) -> bool:
        return any(guard in text for guard in self.protection)

    def found_in(self, text: str) -> bool:
        return self.detects(text) and not self.is_protected(text)

    def issue(self) -> str:
        if self.critical:
            return f"critical bug: {self.name}"
        return f"potential bug: {self.name}"
