"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

This script imports the FastAPI application instance and serializes its OpenAPI
schema to the interfaces/openapi.json file so that the frontend and other API
clients can consume a stable contract without running the server.

Usage:
    python -m src.todo_api.generate_openapi [output_path]

Notes:
- The script ensures every tag declared in `openapi_tags` is present.
- Default output path is relative to the backend root: interfaces/openapi.json
"""
from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional

from .logging_setup import get_logger
from .main import app, openapi_tags

logger = get_logger(__name__)


def _default_output_path() -> str:
    # <backend_root>/interfaces/openapi.json; this file sits in <backend_root>/src/todo_api
    src_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(os.path.dirname(src_dir), "interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the OpenAPI schema contains the declared tags metadata without
    overriding tag definitions that are already present.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Write the OpenAPI schema to `out_path` (or the default) and return the path."""
    schema = app.openapi()
    _ensure_tags(schema)

    path = out_path or _default_output_path()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to %s", path)
    return path


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    path = generate_openapi(args[0] if args else None)
    print(f"Wrote OpenAPI schema to: {path}")


if __name__ == "__main__":
    main()
