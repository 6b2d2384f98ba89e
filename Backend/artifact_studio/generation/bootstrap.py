# artifact_studio/generation/bootstrap.py
"""
Architecture bootstrapper.

One call before the main loop asks for a structural overview (architecture,
models, endpoints, tables) as an embedded JSON object. Anything that goes
wrong (exhausted client, missing block, malformed JSON, wrong shape) falls back
to a deterministic default keyed by the target language. The RunContext is
seeded either way.
"""
import json
from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from artifact_studio.catalog import Catalog
from artifact_studio.core.config import GenerationSettings
from artifact_studio.core.constants import LanguageBucket, ModelKind
from artifact_studio.core.exceptions import GenerationError, MalformedResponseError
from artifact_studio.core.logging import log
from artifact_studio.core.types import (
    ApiEndpoint,
    ProjectArchitecture,
    ProjectSpecification,
    SharedModel,
    StorageTable,
)
from artifact_studio.generation.context import RunContext
from artifact_studio.generation.languages import (
    normalize_language,
    to_flat,
    to_kebab,
    to_pascal,
    to_snake,
)
from artifact_studio.llm.adapter import GenerationClient
from artifact_studio.orchestration.cancellation import CancellationToken


class BootstrapPayload(BaseModel):
    """Expected shape of the embedded JSON block."""
    architecture: ProjectArchitecture
    models: List[SharedModel] = Field(default_factory=list)
    endpoints: List[ApiEndpoint] = Field(default_factory=list)
    tables: List[StorageTable] = Field(default_factory=list)


@dataclass
class BootstrapOutcome:
    payload: BootstrapPayload
    source: str  # "generated" | "default"
    bucket: LanguageBucket
    error: Optional[str] = None

    @property
    def used_default(self) -> bool:
        return self.source == "default"


# ═══════════════════════════════════════════════════════════════════════════════
# EXTRACTION
# ═══════════════════════════════════════════════════════════════════════════════

def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index of the '}' closing the '{' at `start`, ignoring braces in strings."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _decodes_to_object(span: str) -> bool:
    try:
        return isinstance(json.loads(span), dict)
    except json.JSONDecodeError:
        return False


def extract_json_block(text: str) -> Optional[str]:
    """
    Return the first balanced {...} span in `text` that decodes to a JSON
    object, or None.

    Spans that do not decode (a "/users/{id}" placeholder in the prose, a
    broken block) are skipped as a whole. When nothing decodes, the first
    balanced span is returned so the caller can report why it is invalid.
    """
    if not text:
        return None

    first_span = None
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is None:
            # Unbalanced from this start: try the next opening brace
            start = text.find("{", start + 1)
            continue

        span = text[start:end + 1]
        if _decodes_to_object(span):
            return span
        if first_span is None:
            first_span = span
        start = text.find("{", end + 1)
    return first_span


def parse_bootstrap_response(text: str, provider: str = "bootstrap") -> BootstrapPayload:
    """
    Raises:
        MalformedResponseError: Missing block, invalid JSON or wrong shape
    """
    block = extract_json_block(text)
    if block is None:
        raise MalformedResponseError(provider, "No JSON block in architecture response")
    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(provider, f"Architecture block is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise MalformedResponseError(provider, "Architecture block is not an object")
    try:
        return BootstrapPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(provider, f"Architecture block has the wrong shape: {e.error_count()} errors")


# ═══════════════════════════════════════════════════════════════════════════════
# DETERMINISTIC DEFAULTS
# ═══════════════════════════════════════════════════════════════════════════════

# Per bucket: package, main identifier, api prefix, user fields, role fields
_DEFAULT_SHAPES: Dict[LanguageBucket, Dict] = {
    LanguageBucket.JAVA: {
        "package": lambda n: f"com.example.{to_flat(n)}",
        "main": lambda n: f"{to_pascal(n)}Application",
        "api_prefix": "/api/v1",
        "user_fields": ["Long id", "String username", "String email", "String passwordHash", "Long roleId", "LocalDateTime createdAt"],
        "role_fields": ["Long id", "String name", "String description"],
    },
    LanguageBucket.PYTHON: {
        "package": to_snake,
        "main": lambda n: f"{to_snake(n)}.main:app",
        "api_prefix": "/api/v1",
        "user_fields": ["id: int", "username: str", "email: str", "password_hash: str", "role_id: int", "created_at: datetime"],
        "role_fields": ["id: int", "name: str", "description: str"],
    },
    LanguageBucket.JAVASCRIPT: {
        "package": to_kebab,
        "main": lambda n: "App",
        "api_prefix": "/api",
        "user_fields": ["id: number", "username: string", "email: string", "passwordHash: string", "roleId: number", "createdAt: string"],
        "role_fields": ["id: number", "name: string", "description: string"],
    },
    LanguageBucket.CSHARP: {
        "package": lambda n: f"{to_pascal(n)}.Api",
        "main": lambda n: "Program",
        "api_prefix": "/api",
        "user_fields": ["int Id", "string Username", "string Email", "string PasswordHash", "int RoleId", "DateTime CreatedAt"],
        "role_fields": ["int Id", "string Name", "string Description"],
    },
    LanguageBucket.GO: {
        "package": lambda n: f"github.com/example/{to_kebab(n)}",
        "main": lambda n: "main",
        "api_prefix": "/api/v1",
        "user_fields": ["ID int64", "Username string", "Email string", "PasswordHash string", "RoleID int64", "CreatedAt time.Time"],
        "role_fields": ["ID int64", "Name string", "Description string"],
    },
    LanguageBucket.GENERIC: {
        "package": to_snake,
        "main": to_pascal,
        "api_prefix": "/api",
        "user_fields": ["id", "username", "email", "password_hash", "role_id", "created_at"],
        "role_fields": ["id", "name", "description"],
    },
}


def default_architecture(spec: ProjectSpecification) -> BootstrapOutcome:
    """Deterministic architecture for the project's language bucket."""
    bucket = normalize_language(spec.target_language)
    shape = _DEFAULT_SHAPES[bucket]
    prefix = shape["api_prefix"]

    payload = BootstrapPayload(
        architecture=ProjectArchitecture(
            package_name=shape["package"](spec.name),
            main_identifier=shape["main"](spec.name),
            storage_schema_name=f"{to_snake(spec.name)}_db",
            api_prefix=prefix,
        ),
        models=[
            SharedModel(name="User", fields=list(shape["user_fields"]), kind=ModelKind.ENTITY),
            SharedModel(name="Role", fields=list(shape["role_fields"]), kind=ModelKind.ENTITY),
        ],
        endpoints=[
            ApiEndpoint(path=f"{prefix}/users", method="GET", description="List users"),
            ApiEndpoint(path=f"{prefix}/users", method="POST", description="Create a user"),
            ApiEndpoint(path=f"{prefix}/users/{{id}}", method="PUT", description="Update a user"),
            ApiEndpoint(path=f"{prefix}/users/{{id}}", method="DELETE", description="Delete a user"),
        ],
        tables=[
            StorageTable(
                name="users",
                fields=["id", "username", "email", "password_hash", "role_id", "created_at", "updated_at"],
                relationships=["role_id -> roles.id"],
            ),
            StorageTable(
                name="roles",
                fields=["id", "name", "description", "created_at"],
                relationships=["id <- users.role_id"],
            ),
        ],
    )
    return BootstrapOutcome(payload=payload, source="default", bucket=bucket)


# ═══════════════════════════════════════════════════════════════════════════════
# BOOTSTRAPPER
# ═══════════════════════════════════════════════════════════════════════════════

class ArchitectureBootstrapper:
    def __init__(self, client: GenerationClient, catalog: Catalog, config: GenerationSettings) -> None:
        self.client = client
        self.catalog = catalog
        self.config = config

    def build_prompts(self, spec: ProjectSpecification) -> tuple:
        system_prompt = self.catalog.render("bootstrap_system")
        user_prompt = self.catalog.render(
            "bootstrap_user",
            project_name=spec.name,
            language=spec.target_language,
            storage=spec.storage,
            platforms=", ".join(spec.platforms) or "unspecified",
            functional_description=spec.functional_description or "(none)",
        )
        return system_prompt, user_prompt

    async def bootstrap(
        self,
        spec: ProjectSpecification,
        context: RunContext,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BootstrapOutcome:
        """Seed `context` with an architecture. Never raises GenerationError."""
        bucket = normalize_language(spec.target_language)
        system_prompt, user_prompt = self.build_prompts(spec)

        try:
            text = await self.client.generate(
                system_prompt,
                user_prompt,
                max_attempts=self.config.bootstrap_max_attempts,
                temperature=self.config.bootstrap_temperature,
                max_tokens=self.config.bootstrap_max_tokens,
                cancel_token=cancel_token,
                label="architecture bootstrap",
                postprocess=None,
            )
            outcome = BootstrapOutcome(
                payload=parse_bootstrap_response(text, self.client.provider),
                source="generated",
                bucket=bucket,
            )
            log("BOOTSTRAP", f"🏗️ Architecture generated: {outcome.payload.architecture.package_name}", run_id=context.run_id)
        except GenerationError as e:
            outcome = default_architecture(spec)
            outcome.error = str(e)
            log("BOOTSTRAP", f"⚠️ Using default {bucket.value} architecture ({e.category.value})", run_id=context.run_id)

        payload = outcome.payload
        context.set_architecture(payload.architecture)
        context.append_models(payload.models)
        context.append_endpoints(payload.endpoints)
        context.append_tables(payload.tables)
        return outcome
