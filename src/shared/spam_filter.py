import re
from typing import Iterable, Optional, Pattern


class SpamFilter:
    """Denylist match on whole words, case-insensitive.

    One instance serves both the write path and the read path so the two
    can never disagree on what counts as filtered.
    """

    def __init__(self, words: Iterable[str]):
        self.words = tuple(w.strip() for w in words if w and w.strip())
        self._pattern: Optional[Pattern[str]] = None
        if self.words:
            alternatives = "|".join(re.escape(w) for w in self.words)
            self._pattern = re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)", re.IGNORECASE)

    def is_filtered(self, text: Optional[str]) -> bool:
        if not text or self._pattern is None:
            return False
        return self._pattern.search(text) is not None
