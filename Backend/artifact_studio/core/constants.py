# artifact_studio/core/constants.py
"""
Shared enumerations and constants.
"""
from enum import Enum


class Category(str, Enum):
    """Artifact category. Declaration order is generation order."""
    DATABASE = "database"
    BACKEND = "backend"
    FRONTEND = "frontend"
    CONFIG = "config"

    @property
    def rank(self) -> int:
        return CATEGORY_RANK[self]


CATEGORY_RANK = {
    Category.DATABASE: 1,
    Category.BACKEND: 2,
    Category.FRONTEND: 3,
    Category.CONFIG: 4,
}


class Provenance(str, Enum):
    GENERATED = "generated"
    FALLBACK = "fallback"


class ModelKind(str, Enum):
    ENTITY = "entity"
    DTO = "dto"
    ENUM = "enum"


class ProgressStatus(str, Enum):
    PREPARING = "preparing"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


class RunState(str, Enum):
    """Orchestrator lifecycle."""
    IDLE = "idle"
    PREPARING = "preparing"
    BOOTSTRAPPING = "bootstrapping"
    GENERATING = "generating"
    DOCUMENTING = "documenting"
    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.ERROR, RunState.CANCELLED)


class WSMessageType(str, Enum):
    PROGRESS = "PROGRESS"
    RUN_FINISHED = "RUN_FINISHED"


class LanguageBucket(str, Enum):
    """Normalized target-language families used for default architectures."""
    JAVA = "java"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    CSHARP = "csharp"
    GO = "go"
    GENERIC = "generic"
