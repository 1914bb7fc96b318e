"""
Export the API contracts to the docs/api/ directory.

Writes the OpenAPI document of the REST API as JSON and YAML, and the
GraphQL schema as SDL.

Usage:
    python scripts/export_openapi.py
"""

import json
import os
import sys
from pathlib import Path

import yaml

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are validated on import; a throwaway secret is enough to build the app
os.environ.setdefault("JWT_SECRET", "openapi_export_secret_at_least_32_characters")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def export_openapi(docs_dir: Path | None = None) -> dict:
    """
    Export OpenAPI (JSON, YAML) and GraphQL SDL files.

    Returns:
        The OpenAPI document
    """
    from userauth.gql.schema import schema
    from userauth.main import app

    openapi_schema = app.openapi()

    docs_dir = docs_dir or backend_dir.parent / "docs" / "api"
    docs_dir.mkdir(parents=True, exist_ok=True)

    json_path = docs_dir / "openapi.json"
    yaml_path = docs_dir / "openapi.yaml"
    sdl_path = docs_dir / "schema.graphql"

    with open(json_path, "w") as f:
        json.dump(openapi_schema, f, indent=2)
    print(f"OpenAPI JSON exported to: {json_path}")

    with open(yaml_path, "w") as f:
        yaml.dump(openapi_schema, f, default_flow_style=False, sort_keys=False)
    print(f"OpenAPI YAML exported to: {yaml_path}")

    sdl_path.write_text(schema.as_str() + "\n")
    print(f"GraphQL SDL exported to: {sdl_path}")

    print("\nAPI Summary:")
    print(f"  Title: {openapi_schema['info']['title']}")
    print(f"  Version: {openapi_schema['info']['version']}")
    print(f"  Endpoints: {len(openapi_schema['paths'])}")
    print(f"  Schemas: {len(openapi_schema.get('components', {}).get('schemas', {}))}")

    return openapi_schema


if __name__ == "__main__":
    export_openapi()
