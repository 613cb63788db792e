# text_lines.py
from typing import List


def split_lines(text: str) -> List[str]:
    """Hard line breaks of editor text. `\\r\\n` and `\\r` count as `\\n`."""
    if not text:
        return []
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
