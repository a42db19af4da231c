"""Front matter coercion and serialization.

Parsing lives in parser/markdown.py; this module maps parsed YAML onto the
FrontMatterValue union and writes front matter back out.
"""

from datetime import date, datetime
from typing import Any

import yaml

from .models import FrontMatterValue


def coerce_value(value: Any) -> FrontMatterValue:
    """Map a parsed YAML value onto str | bool | int | float | list[str].

    Dates become ISO strings, lists become lists of strings, and any other
    shape is kept as a raw string.
    """
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_scalar_to_str(item) for item in value]
    if value is None:
        return ""
    return yaml.safe_dump(value, default_flow_style=True).strip()


def _scalar_to_str(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return yaml.safe_dump(value, default_flow_style=True).strip()


def coerce_front_matter(metadata: dict[str, Any]) -> dict[str, FrontMatterValue]:
    return {str(key): coerce_value(value) for key, value in metadata.items()}


def _yaml_quote_if_needed(value: str) -> str:
    """Quote a string value if it contains YAML special characters.

    Uses PyYAML to determine if quoting is needed by testing if the value
    roundtrips correctly through YAML parsing. Values like "true", "42",
    "2024-01-15" or anything containing ": " would otherwise change type.
    """
    test_yaml = f"key: {value}"
    try:
        parsed = yaml.safe_load(test_yaml)
        if isinstance(parsed, dict) and parsed.get("key") == value:
            return value
    except yaml.YAMLError:
        pass
    # Need quoting - let PyYAML figure out proper escaping
    dumped = yaml.safe_dump({"key": value}, default_flow_style=False, width=10_000).strip()
    return dumped[5:]


def _format_scalar(value: FrontMatterValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return _yaml_quote_if_needed(str(value))


def _format_yaml_list(items: list[str]) -> str:
    """Format a list as YAML list items with indentation (no trailing newline)."""
    return "\n".join(f"  - {_yaml_quote_if_needed(item)}" for item in items)


def build_frontmatter(front_matter: dict[str, FrontMatterValue]) -> str:
    """Build a front matter block from a mapping.

    Keys keep their insertion order. Lists use block style; an empty list is
    written as `[]`.

    Returns:
        The block including both `---` delimiters and a trailing newline, or
        an empty string when there is nothing to write.
    """
    if not front_matter:
        return ""

    parts = ["---"]
    for key, value in front_matter.items():
        if isinstance(value, list):
            if value:
                parts.append(f"{key}:")
                parts.append(_format_yaml_list(value))
            else:
                parts.append(f"{key}: []")
        else:
            parts.append(f"{key}: {_format_scalar(value)}")
    parts.append("---\n")

    return "\n".join(parts)


def serialize_document(front_matter: dict[str, FrontMatterValue], body: str) -> str:
    """Inverse of parser.parse_document for any front matter it produced."""
    header = build_frontmatter(front_matter)
    if not header:
        return body
    return f"{header}{body}"
