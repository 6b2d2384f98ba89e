# artifact_studio/generation/languages.py
"""
Target-language normalization and identifier helpers.
"""
import re
from typing import List

from artifact_studio.core.constants import LanguageBucket


# Checked in order: the first bucket with a matching keyword wins
LANGUAGE_KEYWORDS = [
    (LanguageBucket.CSHARP, ("c#", "csharp", "c sharp", ".net", "dotnet", "asp.net")),
    (LanguageBucket.JAVASCRIPT, ("typescript", "javascript", "node", "nodejs", "react", "vue", "angular", "ts", "js", "express", "next")),
    (LanguageBucket.JAVA, ("java", "kotlin", "spring", "jvm")),
    (LanguageBucket.PYTHON, ("python", "django", "flask", "fastapi", "py")),
    (LanguageBucket.GO, ("golang", "go", "gin")),
]


def _tokens(language: str) -> List[str]:
    return [t for t in re.split(r"[\s,/;|()+.]+", language.lower()) if t]


def normalize_language(language: str) -> LanguageBucket:
    """
    Map a free-text language name onto a LanguageBucket.

    Examples:
        "Java (Spring Boot)" -> JAVA
        "TypeScript" -> JAVASCRIPT
        "C#" -> CSHARP
        "Rust" -> GENERIC
    """
    if not language:
        return LanguageBucket.GENERIC

    lowered = language.lower()
    tokens = _tokens(language)

    for bucket, keywords in LANGUAGE_KEYWORDS:
        for keyword in keywords:
            # Short or punctuated keywords must match a whole token
            if len(keyword) <= 4 or not keyword.isalpha():
                if keyword in tokens or (not keyword.isalpha() and keyword in lowered):
                    return bucket
            elif keyword in lowered:
                return bucket

    return LanguageBucket.GENERIC


def words(name: str) -> List[str]:
    """Split a project name into ASCII words (camel case aware)."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", name or "")
    return [w.lower() for w in re.findall(r"[A-Za-z0-9]+", spaced)] or ["app"]


def to_pascal(name: str) -> str:
    return "".join(w.capitalize() for w in words(name))


def to_snake(name: str) -> str:
    result = "_".join(words(name))
    return result if not result[0].isdigit() else f"app_{result}"


def to_kebab(name: str) -> str:
    return "-".join(words(name))


def to_flat(name: str) -> str:
    result = "".join(words(name))
    return result if not result[0].isdigit() else f"app{result}"


# Outside the Python bucket, languages whose line comments start with '#'
HASH_COMMENT_KEYWORDS = ("ruby", "rails", "perl", "shell", "bash", "elixir", "phoenix", "crystal", "julia", "r")


def line_comment_prefix(language: str) -> str:
    """Line-comment marker for source code in `language` ('#' or '//')."""
    if normalize_language(language) == LanguageBucket.PYTHON:
        return "#"
    tokens = _tokens(language or "")
    if any(keyword in tokens for keyword in HASH_COMMENT_KEYWORDS):
        return "#"
    return "//"
