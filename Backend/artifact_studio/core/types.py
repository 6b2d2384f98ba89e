# artifact_studio/core/types.py
"""
Shared data models.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    Category,
    ModelKind,
    ProgressStatus,
    Provenance,
    RunState,
)


class Template(BaseModel):
    """One artifact to produce. Loaded once from the catalog."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    category: Category
    min_lines: int = Field(gt=0)
    priority: int

    @property
    def sort_key(self) -> tuple:
        return (self.category.rank, self.priority)


class ProjectArchitecture(BaseModel):
    package_name: str
    main_identifier: str
    storage_schema_name: str
    api_prefix: str


class SharedModel(BaseModel):
    name: str
    fields: List[str] = Field(default_factory=list)
    kind: ModelKind = ModelKind.ENTITY


class ApiEndpoint(BaseModel):
    path: str
    method: str
    description: str = ""

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()


class StorageTable(BaseModel):
    name: str
    fields: List[str] = Field(default_factory=list)
    relationships: List[str] = Field(default_factory=list)


class ArtifactSummary(BaseModel):
    """Lossy digest of an artifact, used only to condition later prompts."""
    title: str
    category: Category
    main_identifiers: List[str] = Field(default_factory=list)
    main_operations: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    exports: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.main_identifiers or self.main_operations or self.dependencies or self.exports)


class Artifact(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1)
    title: str
    content: str
    line_count: int
    category: Category
    description: str
    provenance: Provenance


class ProgressEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    current: int
    total: int
    label: str
    status: ProgressStatus
    message: str


class ProjectSpecification(BaseModel):
    """Input record collected by the UI."""
    name: str = Field(min_length=1)
    target_language: str = Field(min_length=1)
    storage: str = "MySQL"
    platforms: List[str] = Field(default_factory=list)
    functional_description: str = ""
    generation_hint: str = ""

    # Used by the documentation prompt only
    version: str = "1.0.0"
    developer: str = ""
    company: str = ""
    completion_date: str = ""
    software_type: str = ""
    industry: str = ""


class GenerationRunResult(BaseModel):
    state: RunState
    artifacts: List[Artifact] = Field(default_factory=list)
    documentation: Optional[str] = None
    architecture_summary: str = ""
    generated_count: int = 0
    fallback_count: int = 0
