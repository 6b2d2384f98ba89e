# artifact_studio/generation/summary.py
"""
Best-effort digest extraction from generated artifacts.

Everything here is pattern based and lossy. A mismatch yields an empty or
partial result; nothing in this module raises into the run.
"""
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from artifact_studio.core.constants import Category, ModelKind
from artifact_studio.core.logging import log
from artifact_studio.core.types import (
    ApiEndpoint,
    ArtifactSummary,
    SharedModel,
    StorageTable,
)

MAX_ITEMS = 10

IDENTIFIER_PATTERNS = [
    re.compile(r"\b(?:class|interface|struct|enum|record|trait)\s+([A-Z][A-Za-z0-9_]*)"),
    re.compile(r"\btype\s+([A-Z][A-Za-z0-9_]*)\s+(?:struct|interface)\b"),
    re.compile(r"\bCREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?[`\"\[]?(\w+)", re.IGNORECASE),
    re.compile(r"\b(?:const|function)\s+([A-Z][A-Za-z0-9_]*)\s*(?:=|\()"),
]

OPERATION_PATTERNS = [
    re.compile(r"^\s*(?:async\s+)?def\s+([a-z_][A-Za-z0-9_]*)\s*\(", re.MULTILINE),
    re.compile(r"\b(?:async\s+)?function\s+([a-z_][A-Za-z0-9_]*)\s*\("),
    re.compile(r"\bfunc\s+(?:\([^)]*\)\s*)?([A-Za-z_][A-Za-z0-9_]*)\s*\("),
    re.compile(
        r"^\s*(?:public|private|protected|internal)\s+(?:static\s+|async\s+|virtual\s+|override\s+)*"
        r"[\w<>\[\],?]+\s+([a-z][A-Za-z0-9_]*)\s*\(",
        re.MULTILINE,
    ),
    re.compile(r"\bconst\s+([a-z][A-Za-z0-9_]*)\s*=\s*(?:async\s*)?\([^)]*\)\s*=>"),
]

DEPENDENCY_PATTERNS = [
    re.compile(r"^\s*import\s+(?:static\s+)?([\w.]+)\s*;", re.MULTILINE),
    re.compile(r"^\s*from\s+([\w.]+)\s+import\b", re.MULTILINE),
    re.compile(r"^\s*import\s+([\w.]+)\s*$", re.MULTILINE),
    re.compile(r"\bimport\s+[^;'\"]*?from\s+['\"]([^'\"]+)['\"]"),
    re.compile(r"\brequire\(\s*['\"]([^'\"]+)['\"]\s*\)"),
    re.compile(r"^\s*using\s+([\w.]+)\s*;", re.MULTILINE),
    re.compile(r"^\s*import\s+\"([^\"]+)\"", re.MULTILINE),
]

EXPORT_PATTERNS = [
    re.compile(r"\bexport\s+(?:default\s+)?(?:async\s+)?(?:class|function|const|interface|type|enum)\s+(\w+)"),
    re.compile(r"\bmodule\.exports\s*=\s*(\w+)"),
    re.compile(r"\bpublic\s+(?:abstract\s+|final\s+|static\s+)*(?:class|interface|enum|record)\s+(\w+)"),
]

ENDPOINT_PATTERNS = [
    # Spring
    re.compile(r"@(Get|Post|Put|Delete|Patch)Mapping\(\s*(?:value\s*=\s*|path\s*=\s*)?\"([^\"]*)\""),
    # Express / FastAPI / Flask-style decorators and routers
    re.compile(r"\b(?:app|router|api|bp)\.(get|post|put|delete|patch)\(\s*['\"]([^'\"]+)['\"]"),
    # ASP.NET
    re.compile(r"\[Http(Get|Post|Put|Delete|Patch)\(\s*\"([^\"]*)\"\s*\)\]"),
]

TABLE_HEAD_PATTERN = re.compile(
    r"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(?:[`\"\[]?\w+[`\"\]]?\.)?[`\"\[]?(\w+)[`\"\]]?\s*\(",
    re.IGNORECASE,
)
REFERENCES_PATTERN = re.compile(r"\bREFERENCES\s+[`\"\[]?(\w+)[`\"\]]?\s*\(\s*[`\"\[]?(\w+)", re.IGNORECASE)
FOREIGN_KEY_PATTERN = re.compile(r"\bKEY\s*\(\s*[`\"\[]?(\w+)", re.IGNORECASE)
COLUMN_SKIP = {"primary", "foreign", "constraint", "unique", "key", "index", "check"}

ENTITY_PATTERNS = [
    re.compile(r"@Entity\b[\s\S]{0,200}?\bclass\s+(\w+)"),
    re.compile(r"\bclass\s+(\w+)\((?:Base|BaseModel|SQLModel|Document|models\.Model)\)"),
]
ENUM_PATTERN = re.compile(r"\benum\s+([A-Z]\w*)")
DTO_PATTERN = re.compile(r"\b(?:class|interface|record|type)\s+(\w+(?:Dto|DTO|Request|Response))\b")


@dataclass
class ExtractedStructures:
    models: List[SharedModel] = field(default_factory=list)
    endpoints: List[ApiEndpoint] = field(default_factory=list)
    tables: List[StorageTable] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.models or self.endpoints or self.tables)


def _collect(patterns: Iterable[re.Pattern], content: str) -> List[str]:
    found: List[str] = []
    for pattern in patterns:
        found.extend(m.group(1) for m in pattern.finditer(content))
    # Keep first-seen order, drop repeats within this artifact
    return list(dict.fromkeys(found))[:MAX_ITEMS]


def extract_summary(title: str, category: Category, content: str) -> ArtifactSummary:
    """Digest of one artifact. Returns an empty summary when nothing matches."""
    try:
        summary = ArtifactSummary(
            title=title,
            category=category,
            main_identifiers=_collect(IDENTIFIER_PATTERNS, content),
            main_operations=_collect(OPERATION_PATTERNS, content),
            dependencies=_collect(DEPENDENCY_PATTERNS, content),
            exports=_collect(EXPORT_PATTERNS, content),
        )
    except Exception as e:
        log("SUMMARY", f"Extraction failed for '{title}': {e}")
        return ArtifactSummary(title=title, category=category)

    log("SUMMARY", f"'{title}': {len(summary.main_identifiers)} identifiers, {len(summary.main_operations)} operations")
    return summary


def _split_columns(body: str) -> List[str]:
    """Split a CREATE TABLE body on commas outside parentheses."""
    parts, depth, current = [], 0, []
    for char in body:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def _table_body(content: str, start: int) -> Optional[str]:
    """Text between the parenthesis opening at `start - 1` and its match."""
    depth = 1
    for index in range(start, len(content)):
        if content[index] == "(":
            depth += 1
        elif content[index] == ")":
            depth -= 1
            if depth == 0:
                return content[start:index]
    return None


def _parse_tables(content: str) -> List[StorageTable]:
    # Table options after the closing parenthesis (ENGINE=..., CHARSET=...) are ignored
    tables = []
    for match in TABLE_HEAD_PATTERN.finditer(content):
        name, body = match.group(1), _table_body(content, match.end())
        if body is None:
            continue
        fields, relationships = [], []
        for definition in _split_columns(body):
            token = definition.split()[0].strip("`\"[]")
            is_column = token.lower() not in COLUMN_SKIP and re.match(r"^\w+$", token)
            if is_column:
                fields.append(token)

            ref = REFERENCES_PATTERN.search(definition)
            if ref is None:
                continue
            if is_column:
                column = token
            else:
                # FOREIGN KEY (col) REFERENCES ... form
                key = FOREIGN_KEY_PATTERN.search(definition)
                if key is None:
                    continue
                column = key.group(1)
            relationships.append(f"{column} -> {ref.group(1)}.{ref.group(2)}")
        tables.append(StorageTable(name=name, fields=fields, relationships=relationships))
    return tables


def _parse_endpoints(content: str) -> List[ApiEndpoint]:
    endpoints = []
    seen = set()
    for pattern in ENDPOINT_PATTERNS:
        for match in pattern.finditer(content):
            method, path = match.group(1).upper(), match.group(2) or "/"
            if (method, path) in seen:
                continue
            seen.add((method, path))
            endpoints.append(ApiEndpoint(path=path, method=method))
    return endpoints


def _parse_models(content: str) -> List[SharedModel]:
    models = []
    seen = set()
    groups = [
        (ModelKind.ENTITY, ENTITY_PATTERNS),
        (ModelKind.DTO, [DTO_PATTERN]),
        (ModelKind.ENUM, [ENUM_PATTERN]),
    ]
    for kind, patterns in groups:
        for name in _collect(patterns, content):
            if name not in seen:
                seen.add(name)
                models.append(SharedModel(name=name, kind=kind))
    return models


def extract_structures(content: str) -> ExtractedStructures:
    """Models, endpoints and tables declared in an artifact, if recognizable."""
    try:
        return ExtractedStructures(
            models=_parse_models(content)[:MAX_ITEMS],
            endpoints=_parse_endpoints(content)[:MAX_ITEMS],
            tables=_parse_tables(content)[:MAX_ITEMS],
        )
    except Exception as e:
        log("SUMMARY", f"Structure extraction failed: {e}")
        return ExtractedStructures()
