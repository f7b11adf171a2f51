"""Flask routing entry point for Wikimark."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Flask, abort, g, jsonify, request
from werkzeug.exceptions import HTTPException

from wikimark_core.auth import check_auth
from wikimark_core.config import with_config
from wikimark_core.content import SUPPORTED_SYNTAXES, render_content
from wikimark_core.openapi import (
    BEARER_SECURITY_REQUIREMENT,
    document_operation,
    generate_openapi_spec,
)
from wikimark_core.response import error_code_for_status, error_response, success_response
from wikimark_core.templates import TEMPLATE_NAMES, get_wiki_templates, insert_template

logger = logging.getLogger(__name__)

app = Flask(__name__)


def _success(message: str, data: Optional[Any] = None, *, code: str = "OK", status_code: int = 200):
    return success_response(message, data, code=code, status_code=status_code)


def _response_schema(data_schema: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "type": "object",
        "required": ["success", "code", "message", "timestamp"],
        "properties": {
            "success": {"type": "boolean"},
            "code": {"type": "string"},
            "message": {"type": "string"},
            "timestamp": {"type": "string", "format": "date-time"},
        },
    }

    if data_schema is None:
        schema["properties"]["data"] = {"type": "null"}
    else:
        schema["properties"]["data"] = {"oneOf": [data_schema, {"type": "null"}]}

    return schema


_TEMPLATE_NAME_PARAMETER = {
    "name": "name",
    "in": "path",
    "required": True,
    "schema": {"type": "string", "enum": list(TEMPLATE_NAMES)},
}


def _json_body() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object")
    return data


def _require_content(data: Dict[str, Any]) -> str:
    content = data.get("content")
    if not isinstance(content, str):
        abort(400, description="'content' must be a string")
    limit = g.config["max_content_length"]
    if len(content) > limit:
        logger.warning("Rejected content of %d characters (limit %d)", len(content), limit)
        abort(413, description=f"Content exceeds the limit of {limit} characters")
    return content


def _require_offset(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass but never a valid offset
    if not isinstance(value, int) or isinstance(value, bool):
        abort(400, description=f"'{key}' must be an integer")
    return value


def _require_template(name: str) -> None:
    if name not in TEMPLATE_NAMES:
        abort(404, description=f"Template '{name}' not found")


@app.errorhandler(HTTPException)
def _handle_http_exception(exc: HTTPException):
    message = exc.description or exc.name
    return error_response(error_code_for_status(exc.code), message, status_code=exc.code or 500)


@app.errorhandler(Exception)
def _handle_unexpected_exception(exc: Exception):
    logger.exception("Unhandled error while serving %s", request.path)
    return error_response("INTERNAL_ERROR", "An unexpected error occurred.", status_code=500)


@app.route("/endpoint/<endpoint_name>/render", methods=["POST"])
@with_config
@document_operation(
    "/render",
    "post",
    flavors=("preview",),
    summary="Render an article body to HTML",
    description=(
        "Converts wiki markup (or Markdown) into an HTML fragment. Code blocks and "
        "inline code are escaped; prose and table cells are inserted verbatim."
    ),
    operationId="renderContent",
    security=BEARER_SECURITY_REQUIREMENT,
    requestBody={
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "required": ["content"],
                    "properties": {
                        "content": {"type": "string"},
                        "syntax": {
                            "type": "string",
                            "enum": list(SUPPORTED_SYNTAXES),
                            "description": "Defaults to the endpoint's configured syntax.",
                        },
                    },
                }
            }
        },
    },
    responses={
        "200": {
            "description": "Rendered fragment",
            "content": {
                "application/json": {
                    "schema": _response_schema(
                        {
                            "type": "object",
                            "required": ["html", "syntax"],
                            "properties": {
                                "html": {"type": "string"},
                                "syntax": {"type": "string"},
                            },
                        }
                    )
                }
            },
        },
        "400": {"description": "Invalid Input: content or syntax is not valid"},
        "403": {"description": "Forbidden: Invalid token"},
        "413": {"description": "Payload Too Large: content exceeds the configured limit"},
    },
)
def api_render(endpoint_name: str):
    check_auth()
    data = _json_body()
    content = _require_content(data)
    syntax = data.get("syntax") or g.config["default_syntax"]
    if syntax not in SUPPORTED_SYNTAXES:
        abort(400, description=f"Unsupported syntax '{syntax}'")

    html = render_content(content, syntax)
    return _success("Content rendered.", data={"html": html, "syntax": syntax})


@app.route("/endpoint/<endpoint_name>/templates", methods=["GET"])
@with_config
@document_operation(
    "/templates",
    "get",
    flavors=("editor",),
    summary="List editor templates",
    description="Returns every boilerplate snippet keyed by template name.",
    operationId="listTemplates",
    security=BEARER_SECURITY_REQUIREMENT,
    responses={
        "200": {
            "description": "Template catalog returned",
            "content": {
                "application/json": {
                    "schema": _response_schema(
                        {
                            "type": "object",
                            "additionalProperties": {"type": "string"},
                        }
                    )
                }
            },
        },
        "403": {"description": "Forbidden: Invalid token"},
    },
)
def api_list_templates(endpoint_name: str):
    check_auth()
    return _success("Templates retrieved.", data=get_wiki_templates())


@app.route("/endpoint/<endpoint_name>/templates/<name>", methods=["GET"])
@with_config
@document_operation(
    "/templates/{name}",
    "get",
    flavors=("editor",),
    summary="Read a single editor template",
    operationId="getTemplate",
    parameters=[_TEMPLATE_NAME_PARAMETER],
    security=BEARER_SECURITY_REQUIREMENT,
    responses={
        "200": {
            "description": "Template returned",
            "content": {
                "application/json": {
                    "schema": _response_schema(
                        {
                            "type": "object",
                            "required": ["name", "template"],
                            "properties": {
                                "name": {"type": "string"},
                                "template": {"type": "string"},
                            },
                        }
                    )
                }
            },
        },
        "403": {"description": "Forbidden: Invalid token"},
        "404": {"description": "Not Found: Unknown template"},
    },
)
def api_get_template(endpoint_name: str, name: str):
    check_auth()
    _require_template(name)
    template = get_wiki_templates()[name]
    return _success("Template retrieved.", data={"name": name, "template": template})


@app.route("/endpoint/<endpoint_name>/templates/<name>/insert", methods=["POST"])
@with_config
@document_operation(
    "/templates/{name}/insert",
    "post",
    flavors=("editor",),
    summary="Insert a template into editor content",
    description=(
        "Replaces the selected range of the content with the template, separating "
        "it from surrounding text with a blank line, and returns the new caret position."
    ),
    operationId="insertTemplate",
    parameters=[_TEMPLATE_NAME_PARAMETER],
    security=BEARER_SECURITY_REQUIREMENT,
    requestBody={
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "required": ["content", "start", "end"],
                    "properties": {
                        "content": {"type": "string"},
                        "start": {"type": "integer", "minimum": 0},
                        "end": {"type": "integer", "minimum": 0},
                    },
                }
            }
        },
    },
    responses={
        "200": {
            "description": "Template inserted",
            "content": {
                "application/json": {
                    "schema": _response_schema(
                        {
                            "type": "object",
                            "required": ["content", "position"],
                            "properties": {
                                "content": {"type": "string"},
                                "position": {"type": "integer"},
                            },
                        }
                    )
                }
            },
        },
        "400": {"description": "Invalid Input: selection is not valid"},
        "403": {"description": "Forbidden: Invalid token"},
        "404": {"description": "Not Found: Unknown template"},
    },
)
def api_insert_template(endpoint_name: str, name: str):
    check_auth()
    _require_template(name)
    data = _json_body()
    content = _require_content(data)
    start = _require_offset(data, "start")
    end = _require_offset(data, "end")

    try:
        result = insert_template(content, name, start, end)
    except ValueError as exc:
        abort(400, description=str(exc))
    return _success(
        "Template inserted.",
        data={"content": result.content, "position": result.position},
    )


@app.route("/endpoint/<endpoint_name>/openapi.json", methods=["GET"])
@with_config
@document_operation(
    "/openapi.json",
    "get",
    flavors=("always",),
    summary="Get OpenAPI schema",
    description="Returns this OpenAPI schema document.",
    operationId="getOpenAPISchema",
    responses={
        "200": {
            "description": "OpenAPI JSON returned",
            "content": {
                "application/json": {
                    "schema": {"type": "object", "properties": {}},
                }
            },
        }
    },
)
def openapi_schema(endpoint_name: str):
    spec = generate_openapi_spec(endpoint_name, request.host_url, app)
    return jsonify(spec)


@app.route("/endpoint/<endpoint_name>/health", methods=["GET"])
@with_config
@document_operation(
    "/health",
    "get",
    flavors=("always",),
    summary="Health check",
    description="Check whether API server is live. No authentication required.",
    operationId="healthCheck",
    responses={
        "200": {
            "description": "Server is running",
            "content": {
                "application/json": {
                    "schema": _response_schema(
                        {
                            "type": "object",
                            "required": ["status"],
                            "properties": {"status": {"type": "string", "example": "ok"}},
                        }
                    )
                }
            },
        }
    },
)
def api_health(endpoint_name: str):
    return _success("Service healthy.", data={"status": "ok"})


if __name__ == "__main__":  # pragma: no cover - manual execution only
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host="0.0.0.0", port=5000)
