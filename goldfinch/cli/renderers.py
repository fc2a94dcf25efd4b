"""JSON and plain-text rendering of command results.

Renderers never reorder: output follows the order they are given.
"""
import json
from typing import Any, Sequence

from goldfinch.secrets.domains.models import Match, SecretRecord, SecretStore

FORMAT_JSON = "json"
FORMAT_PLAIN = "plain"
OUTPUT_FORMATS = (FORMAT_JSON, FORMAT_PLAIN)


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, sort_keys=True)


def render_identifiers(identifiers: Sequence[str], output_format: str) -> str:
    if output_format == FORMAT_JSON:
        return _to_json(list(identifiers))
    return "\n".join(identifiers)


def render_record(record: SecretRecord, output_format: str) -> str:
    if output_format == FORMAT_JSON:
        return _to_json(record.to_json())
    return "\n".join(f"{key}: {value.render()}" for key, value in record.items())


def render_store(store: SecretStore, output_format: str) -> str:
    """Render several records; plain lines are "<identifier>/<key>: <value>"."""
    if output_format == FORMAT_JSON:
        return _to_json(store.to_json())
    return "\n".join(
        f"{record.identifier}/{key}: {value.render()}"
        for record in store
        for key, value in record.items()
    )


def render_matches(matches: Sequence[Match], output_format: str) -> str:
    if output_format == FORMAT_JSON:
        return _to_json([match.to_dict() for match in matches])
    return "\n".join(f"{match.label}: {match.display}" for match in matches)
