"""OpenAPI document generation for the routes registered on the Flask app."""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Iterable, Tuple

from apispec import APISpec
from flask import Flask, abort, g, has_request_context

API_TITLE = "Wikimark API"
API_VERSION = "1.0.0"

_API_DESCRIPTION = (
    "Renders knowledge-base article bodies written in wiki markup (tables, fenced "
    "and inline code, headings, bullets and bold text) into HTML fragments, and "
    "serves the editor's boilerplate templates. Authenticated routes expect "
    "'Authorization: Bearer <token>'. Only code is HTML-escaped: callers must "
    "sanitise fragments rendered from untrusted markup."
)

BEARER_SECURITY_REQUIREMENT = [{"BearerAuth": []}]

# Operation documents keyed by path, then by HTTP method.
OperationDocs = Dict[str, Dict[str, Any]]
FlavorMap = Dict[str, Dict[str, Tuple[str, ...]]]


def _normalise_flavors(flavors: Iterable[str] | None) -> Tuple[str, ...]:
    normalised: list[str] = []
    for raw_flavor in flavors or ():
        if not isinstance(raw_flavor, str):
            raise TypeError("Flavor annotations must be strings")
        flavor = raw_flavor.strip().lower()
        if not flavor:
            raise ValueError("Flavor annotations cannot be empty strings")
        if flavor != "default" and flavor not in normalised:
            normalised.append(flavor)
    return tuple(normalised)


def document_operation(
    path: str,
    method: str,
    *,
    flavors: Iterable[str] | None = None,
    **operation: Any,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Attach an OpenAPI operation object to a Flask view function.

    ``path`` is relative to the endpoint prefix.  ``flavors`` restricts the
    operation to endpoints configured with one of the listed flavors; the
    special flavor ``always`` keeps it in every document.
    """

    if not operation:
        raise ValueError(
            f"OpenAPI operation for {method.upper()} {path} must define at least one field"
        )

    method = method.lower()
    definition = copy.deepcopy(operation)
    operation_flavors = _normalise_flavors(flavors)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        docs: OperationDocs = getattr(func, "__openapi__", {})
        flavor_map: FlavorMap = getattr(func, "__openapi_flavors__", {})
        path_docs = docs.setdefault(path, {})
        if method in path_docs:
            raise ValueError(
                f"Duplicate OpenAPI definition for {method.upper()} {path} on {func.__name__}"
            )
        path_docs[method] = copy.deepcopy(definition)
        flavor_map.setdefault(path, {})[method] = operation_flavors
        func.__openapi__ = docs
        func.__openapi_flavors__ = flavor_map
        return func

    return decorator


def collect_documented_paths(flask_app: Flask) -> Tuple[OperationDocs, FlavorMap]:
    """Gather the operation documents attached to the app's view functions."""

    documented: OperationDocs = {}
    flavors: FlavorMap = {}
    for view_func in flask_app.view_functions.values():
        view_docs = getattr(view_func, "__openapi__", None)
        if not view_docs:
            continue
        view_flavors = getattr(view_func, "__openapi_flavors__", {})
        for path, operations in view_docs.items():
            merged = documented.setdefault(path, {})
            merged_flavors = flavors.setdefault(path, {})
            for method, details in operations.items():
                if method in merged and merged[method] != details:
                    raise ValueError(f"Conflicting OpenAPI definitions for {method.upper()} {path}")
                merged[method] = copy.deepcopy(details)
                merged_flavors[method] = tuple(view_flavors.get(path, {}).get(method, ()))
    return documented, flavors


def _configured_flavor() -> str:
    if has_request_context():
        config = getattr(g, "config", None)
        if isinstance(config, dict):
            flavor = config.get("flavor", "default")
            if isinstance(flavor, str) and flavor.strip():
                return flavor.strip().lower()
    return "default"


def filter_paths_by_flavor(paths: OperationDocs, flavors: FlavorMap, flavor: str) -> OperationDocs:
    filtered: OperationDocs = {}
    for path, operations in paths.items():
        kept = {
            method: copy.deepcopy(details)
            for method, details in operations.items()
            if flavor == "default"
            or "always" in flavors.get(path, {}).get(method, ())
            or flavor in flavors.get(path, {}).get(method, ())
        }
        if kept:
            filtered[path] = kept
    return filtered


def _build_spec(paths: OperationDocs) -> APISpec:
    spec = APISpec(
        title=API_TITLE,
        version=API_VERSION,
        openapi_version="3.1.0",
        info={"description": _API_DESCRIPTION},
    )
    spec.components.security_scheme(
        "BearerAuth",
        {"type": "http", "scheme": "bearer"},
    )
    for path, operations in sorted(paths.items()):
        spec.path(path=path, operations=operations)
    return spec


def generate_openapi_spec(endpoint_name: str, host_url: str, flask_app: Flask) -> Dict[str, Any]:
    """Build the OpenAPI document served for one endpoint."""

    try:
        paths, flavors = collect_documented_paths(flask_app)
        filtered = filter_paths_by_flavor(paths, flavors, _configured_flavor())
        spec = _build_spec(filtered).to_dict()
    except Exception as exc:  # pragma: no cover - bubbled via abort
        abort(500, description=f"Failed to build OpenAPI specification: {exc}")

    spec.setdefault("components", {}).setdefault("schemas", {})
    spec["servers"] = [
        {
            "url": f"{host_url.rstrip('/')}/endpoint/{endpoint_name}",
            "description": "Endpoint-specific API",
        }
    ]
    return spec
