import re
from typing import Optional

_WHITESPACE_RE = re.compile(r"\s+")

def normalize_answer_text(value: Optional[str]) -> str:
    """Trim, collapse inner whitespace and case-fold.

    Used both when scoring an answer and when the review resolves the correct
    option, so the two never disagree.
    """
    return _WHITESPACE_RE.sub(" ", str(value or "").strip()).casefold()
