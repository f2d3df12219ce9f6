"""Shared pytest fixtures for the carto-create test suite.

Provides reusable fixtures for:
- Temporary template trees (React-like and Angular-like)
- Project configurations for both authentication modes
- A recording rich console
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from carto_create.scaffolder import ProjectConfig


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

REACT_PACKAGE_JSON: dict[str, Any] = {
    "name": "@carto/create-react",
    "version": "0.0.1",
    "description": "CARTO app template for React",
    "author": "CARTO",
    "license": "MIT",
    "keywords": ["carto", "react"],
    "repository": {"type": "git", "url": "https://github.com/CartoDB/carto-app-templates"},
    "bin": {"create-react": "scripts/create.js"},
    "type": "module",
    "scripts": {"dev": "vite", "build": "tsc && vite build"},
    "dependencies": {
        "@carto/create-common": "^0.0.1",
        "@deck.gl/core": "^9.0.0",
        "react": "^18.3.1",
        "react-dom": "^18.3.1",
    },
    "devDependencies": {
        "@carto/create-common": "^0.0.1",
        "typescript": "^5.4.5",
        "vite": "^5.2.0",
    },
    "peerDependencies": {"@carto/create-common": "*"},
}

ANGULAR_PACKAGE_JSON: dict[str, Any] = {
    "name": "@carto/create-angular",
    "version": "0.0.1",
    "dependencies": {
        "@angular/core": "^17.3.0",
        "@carto/create-common": "^0.0.1",
    },
}


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Write ``{relative path: content}`` under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def react_template(tmp_path: Path) -> Path:
    """A small React-like template with files to exclude and to template."""
    root = tmp_path / "templates" / "create-react"
    return write_tree(root, {
        "package.json": json.dumps(REACT_PACKAGE_JSON, indent=2),
        "index.html": "<html><head><title>$title</title></head></html>\n",
        ".env": "VITE_CARTO_ACCESS_TOKEN=dev-token\n",
        ".env.template": (
            "VITE_CARTO_ACCESS_TOKEN=$accessToken\n"
            "VITE_CARTO_AUTH_ENABLED=$authEnabled\n"
            "VITE_CARTO_AUTH_CLIENT_ID=$authClientID\n"
        ),
        ".env.local": "SECRET=1\n",
        ".env.development": "DEBUG=1\n",
        "src/context.ts": "export const DEFAULT_APP_CONTEXT = { title: '$title' };\n",
        "src/main.tsx": "import '@carto/create-common/style.css';\nimport App from './App';\n",
        "src/App.tsx": "export default function App() { return '$title'; }\n",
        "src/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR",
        "node_modules/react/index.js": "module.exports = {};\n",
        "dist/index.js": "built\n",
        "scripts/create.js": "#!/usr/bin/env node\n",
        ".vscode/settings.json": "{}\n",
    })


@pytest.fixture
def angular_template(tmp_path: Path) -> Path:
    """A small Angular-like template using ``environment.template.ts``."""
    root = tmp_path / "templates" / "create-angular"
    return write_tree(root, {
        "package.json": json.dumps(ANGULAR_PACKAGE_JSON, indent=2),
        "index.html": "<title>$title</title>\n",
        "src/environments/environment.ts": "export const environment = {};\n",
        "src/environments/environment.template.ts": (
            "export const environment = {\n"
            "  APP_TITLE: '$title',\n"
            "  ACCESS_TOKEN: '$accessToken',\n"
            "  AUTH_ENABLED: '$authEnabled' === 'true',\n"
            "  AUTH_CLIENT_ID: '$authClientID',\n"
            "  AUTH_ORGANIZATION_ID: '$authOrganizationID',\n"
            "  AUTH_DOMAIN: '$authDomain',\n"
            "};\n"
        ),
        "src/styles.css": "@import '@carto/create-common/style.css';\n",
        ".angular/cache/index": "cache\n",
    })


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------


@pytest.fixture
def token_config() -> ProjectConfig:
    """Access-token configuration."""
    return ProjectConfig(title="Demo", auth_enabled=False, access_token="abc123")


@pytest.fixture
def oauth_config() -> ProjectConfig:
    """OAuth configuration with the default domain."""
    return ProjectConfig(
        title="OAuth Demo",
        auth_enabled=True,
        auth_client_id="client-42",
        auth_organization_id="org-7",
    )


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------


@pytest.fixture
def recording_console() -> Console:
    """Rich console writing to memory; read it back with ``export_text()``."""
    return Console(file=io.StringIO(), record=True, width=120, color_system=None)


def snapshot_tree(root: Path) -> dict[str, bytes]:
    """Map every file under *root* to its bytes."""
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def snapshot():
    """Return :func:`snapshot_tree` for tests that compare whole trees."""
    return snapshot_tree
