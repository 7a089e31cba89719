#!/usr/bin/env python3
"""
Generate JSON Schemas, YAML variants, and OpenAPI from Pydantic models.

Outputs under src/specs/:
 - schemas/*.json (and *.yaml)
 - openapi.yaml and openapi.json
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import yaml


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SPECS = SRC / "specs"
SCHEMAS_DIR = SPECS / "schemas"

sys.path.insert(0, str(ROOT))

from src.specs.registry import SCHEMA_MODELS  # noqa: E402
from src.specs.common.error_response_spec import ErrorResponse  # noqa: E402
from src.specs.http.search import SearchResponse  # noqa: E402


def write_json_yaml(obj: dict, json_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    with json_path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
    yaml_path = json_path.with_suffix(".yaml")
    with yaml_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(obj, f, sort_keys=False)


def generate_model_schemas() -> None:
    for filename, model in SCHEMA_MODELS.items():
        schema = model.model_json_schema()
        write_json_yaml(schema, SCHEMAS_DIR / filename)


def _error(description: str) -> dict:
    return {
        "description": description,
        "content": {
            "application/json": {"schema": {"$ref": "#/components/schemas/ErrorResponse"}}
        },
    }


def _query(name: str, required: bool, description: str) -> dict:
    return {
        "in": "query",
        "name": name,
        "schema": {"type": "string"},
        "required": required,
        "description": description,
    }


def build_openapi() -> dict:
    # Inline the model schemas as OpenAPI components
    components = {
        "schemas": {
            "SearchResponse": SearchResponse.model_json_schema(),
            "ErrorResponse": ErrorResponse.model_json_schema(),
        }
    }

    spec = {
        "openapi": "3.0.3",
        "info": {
            "title": "Around Functions API",
            "version": "0.1.0",
            "description": "Submit location-tagged posts and search for posts nearby.",
        },
        "servers": [
            {"url": "http://localhost:7071/api", "description": "Local Functions host"}
        ],
        "paths": {
            "/post": {
                "post": {
                    "summary": "Submit a post with an image",
                    "operationId": "createPost",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "multipart/form-data": {
                                "schema": {
                                    "type": "object",
                                    "required": ["image", "lat", "lon"],
                                    "properties": {
                                        "user": {"type": "string"},
                                        "message": {"type": "string"},
                                        "lat": {"type": "string"},
                                        "lon": {"type": "string"},
                                        "image": {"type": "string", "format": "binary"},
                                    },
                                }
                            }
                        },
                    },
                    "responses": {
                        "200": {"description": "Post stored"},
                        "400": _error("Invalid coordinates, missing image or filtered words"),
                        "500": _error("Image or index storage failed"),
                    },
                }
            },
            "/search": {
                "get": {
                    "summary": "Find posts within a radius of a coordinate",
                    "operationId": "searchPosts",
                    "parameters": [
                        _query("lat", True, "Latitude in degrees"),
                        _query("lon", True, "Longitude in degrees"),
                        _query("range", False, "Radius; bare numbers are km (default 200km)"),
                    ],
                    "responses": {
                        "200": {
                            "description": "Matching posts, possibly empty",
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/SearchResponse"}
                                }
                            },
                        },
                        "400": _error("Invalid coordinates or range"),
                        "500": _error("Index query failed"),
                    },
                }
            },
        },
        "components": components,
    }
    return spec


def generate_openapi() -> None:
    spec = build_openapi()
    write_json_yaml(spec, SPECS / "openapi.json")


def main() -> None:
    generate_model_schemas()
    generate_openapi()
    print("Specs generated under src/specs/")


if __name__ == "__main__":
    main()
