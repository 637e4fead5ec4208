"""Rule-table files.

Rule tables are stored as JSON::

    {
      "default": {"min": 0.1, "max": 0.3, "special_cases": {}},
      "rules": {"a": {"min": 0.1, "max": 0.3, "special_cases": {"t": 0.35}}},
      "exceptions": {"a": ["v", "w", "y"]},
      "rotations": {"a": {"before": {}, "after": {"v": 5}}},
      "lookup": {"a": {"b": 0.215}}
    }

Top-level keys left out of a file fall back to the shipped defaults, so a
file produced by ``graffitizer build-lookup`` may hold only ``lookup``.
"""

import json
from pathlib import Path

from graffitizer.domain import RuleTables, default_rule_tables
from graffitizer.exceptions import RuleTableError


def load_rule_tables(path: Path) -> RuleTables:
    """Load rule tables from a JSON file.

    Args:
        path: File to read

    Returns:
        Rule tables, with omitted sections taken from the defaults

    Raises:
        RuleTableError: If the file cannot be read or its content is invalid
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RuleTableError(f"Cannot read rule file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RuleTableError(f"Rule file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise RuleTableError(f"Rule file {path} must contain a JSON object")

    merged = {**default_rule_tables().to_dict(), **data}
    return RuleTables.from_dict(merged)


def save_rule_tables(tables: RuleTables, path: Path) -> Path:
    """Write rule tables to a JSON file.

    Raises:
        RuleTableError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(tables.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise RuleTableError(f"Cannot write rule file {path}: {e}") from e
    return path
