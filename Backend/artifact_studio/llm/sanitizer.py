# artifact_studio/llm/sanitizer.py
"""
Response post-processing for generated artifacts.

Models wrap code in markdown fences and surround it with chatter
("Here is the complete implementation:", "Let me know if..."). This module
removes that wrapping. It is best-effort: nothing here raises, and when
cleaning would leave nothing behind the original text is returned.
"""
import re
from typing import List, Tuple

from artifact_studio.core.logging import log

# ═══════════════════════════════════════════════════════════════════════════════
# PATTERNS
# ═══════════════════════════════════════════════════════════════════════════════

FENCE_LINE = re.compile(r"^\s*(```|~~~)[\w+#.\-]*\s*$")
WRAPPER_LANGUAGES = {"markdown", "md"}
# Closing fence glued to the last code line: "SELECT 1;```"
TRAILING_FENCE = re.compile(r"^(.*\S)\s*(```|~~~)\s*$")

LEAD_IN_PATTERNS = [
    re.compile(p, re.IGNORECASE) for p in (
        r"^(sure|certainly|of course|absolutely|okay|ok)\b[^\n]*$",
        r"^here(?:'s| is| are)\b[^\n]*[:.!]\s*$",
        r"^below (?:is|are)\b[^\n]*[:.]\s*$",
        r"^(?:the )?following (?:is|are)\b[^\n]*[:.]\s*$",
        r"^i(?:'ve| have| will|'ll)\s+(?:created|written|generated|implemented|write|create|generate)\b[^\n]*$",
        r"^以下是[^\n]*$",
        r"^好的[^\n]*$",
    )
]

TRAIL_OFF_PATTERNS = [
    re.compile(p, re.IGNORECASE) for p in (
        r"^(?:this|the above) (?:code|implementation|file|module|script|configuration)\b[^\n]*$",
        r"^(?:\*\*)?note(?:\*\*)?\s*:[^\n]*$",
        r"^let me know\b[^\n]*$",
        r"^i hope this\b[^\n]*$",
        r"^feel free to\b[^\n]*$",
        r"^(?:key features|explanation|features)\s*:?\s*$",
        r"^这段代码[^\n]*$",
        r"^以上[^\n]*$",
    )
]

# First line of recognizable code, markup, SQL or config
CODE_START = re.compile(
    r"^\s*(?:"
    r"package\s|import\s|from\s+\S+\s+import\s|#include|#!|using\s|namespace\s|"
    r"(?:public|private|protected|internal|abstract|final|static)\s|"
    r"(?:class|interface|enum|struct|record|def|async def|func|fn|function|const|let|var|type|export|module)\s|"
    r"@\w|/\*|//|--|<\?xml|<!DOCTYPE|<[a-zA-Z!]|"
    r"(?:CREATE|ALTER|INSERT|DROP|USE|SET|SELECT|BEGIN|DELIMITER|UPDATE|DELETE)\s|"
    r"FROM\s|WORKDIR\s|RUN\s|"
    r"[A-Za-z_][\w.\-]*\s*:\s*\S*$|\[[\w.\-]+\]\s*$|[{\[]\s*$|#\s"
    r")",
)

PROSE_LINE = re.compile(r"^[A-Za-z一-鿿][^;{}()=<>]*[.:!?。：]\s*$")

# How far into the response we look for the start of code
MAX_PROSE_LINES = 15


def _split_lines(text: str) -> List[str]:
    lines: List[str] = []
    for line in text.split("\n"):
        glued = TRAILING_FENCE.match(line)
        if glued and not FENCE_LINE.match(line) and "`" not in glued.group(1):
            lines.extend([glued.group(1), glued.group(2)])
        else:
            lines.append(line)
    return lines


def fenced_regions(lines: List[str]) -> List[Tuple[int, int]]:
    """
    (open, close) line indexes of each fenced block, paired in order.
    An unclosed last fence runs to the end of the text.
    """
    fences = [i for i, line in enumerate(lines) if FENCE_LINE.match(line)]
    regions = []
    for pos in range(0, len(fences), 2):
        close = fences[pos + 1] if pos + 1 < len(fences) else len(lines)
        regions.append((fences[pos], close))
    return regions


def strip_fences(text: str) -> str:
    """
    Reduce a fenced response to the content of its fenced blocks.

    With one fence line only that line goes. With fenced blocks, everything
    outside them goes (lead-ins, trail-offs and prose between two blocks).
    """
    lines = _split_lines(text)
    regions = fenced_regions(lines)
    if not regions:
        return text

    if len(regions) == 1 and regions[0][1] == len(lines):
        return "\n".join(line for line in lines if not FENCE_LINE.match(line))

    blocks = ["\n".join(lines[start + 1:end]).strip("\n") for start, end in regions]
    return "\n\n".join(block for block in blocks if block)


def unwrap_outer_fence(text: str) -> str:
    """
    Remove a fence pair wrapping the whole text. Fences inside the text,
    such as code examples in a document, are kept as they are.
    """
    lines = _split_lines(text)
    content = [i for i, line in enumerate(lines) if line.strip()]
    if len(content) < 2:
        return text
    first, last = content[0], content[-1]
    if not (FENCE_LINE.match(lines[first]) and FENCE_LINE.match(lines[last])):
        return text

    fences = [i for i, line in enumerate(lines) if FENCE_LINE.match(line)]
    opening = lines[first].strip().lstrip("`~").lower()
    # Inner fences only belong to a wrapper explicitly tagged as markdown
    if len(fences) > 2 and opening not in WRAPPER_LANGUAGES:
        return text
    return "\n".join(lines[first + 1:last])


def _is_lead_in(line: str) -> bool:
    if CODE_START.match(line) and not PROSE_LINE.match(line):
        return False
    return any(p.match(line) for p in LEAD_IN_PATTERNS)


def strip_chatter(text: str) -> str:
    """Drop known lead-in lines at the top and trail-off lines at the bottom."""
    lines: List[str] = text.split("\n")

    while lines and (not lines[0].strip() or _is_lead_in(lines[0].strip())):
        lines.pop(0)

    # Trail-off: cut at the first matching line within the last block of prose
    for index in range(len(lines) - 1, -1, -1):
        stripped = lines[index].strip()
        if not stripped:
            continue
        if any(p.match(stripped) for p in TRAIL_OFF_PATTERNS):
            lines = lines[:index]
            continue
        if PROSE_LINE.match(stripped) and not CODE_START.match(stripped):
            continue
        break

    return "\n".join(lines)


def collapse_blank_lines(text: str) -> str:
    return re.sub(r"\n[ \t]*\n(?:[ \t]*\n)+", "\n\n", text)


def trim_to_code_start(text: str) -> str:
    """If the text still opens with prose, drop lines up to the first code line."""
    lines = text.split("\n")
    first = next((i for i, line in enumerate(lines) if line.strip()), None)
    if first is None or CODE_START.match(lines[first]):
        return text
    if not PROSE_LINE.match(lines[first].strip()):
        return text

    for index in range(first, min(len(lines), first + MAX_PROSE_LINES)):
        if CODE_START.match(lines[index]) and not PROSE_LINE.match(lines[index].strip()):
            return "\n".join(lines[index:])
    return text


def sanitize_response(raw: str) -> str:
    """
    Clean a generation response down to the artifact content.

    Never raises; returns the stripped original when cleaning empties it.
    """
    if not raw or not isinstance(raw, str):
        return raw or ""

    text = raw.replace("\r\n", "\n")
    text = strip_fences(text)
    text = strip_chatter(text)
    text = collapse_blank_lines(text)
    text = trim_to_code_start(text)
    text = text.strip("\n").rstrip()

    if not text.strip():
        log("SANITIZER", "Sanitizing emptied the response - keeping original text")
        return raw.strip()

    if len(text) != len(raw):
        log("SANITIZER", f"Trimmed {len(raw) - len(text)} chars of wrapping")
    return text


def sanitize_document(raw: str) -> str:
    """Lighter cleaning for prose output: an outer wrapping fence and blank-line runs only."""
    if not raw or not isinstance(raw, str):
        return raw or ""
    text = collapse_blank_lines(unwrap_outer_fence(raw.replace("\r\n", "\n"))).strip()
    return text or raw.strip()
