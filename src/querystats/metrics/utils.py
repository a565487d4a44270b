# src/querystats/metrics/utils.py
from __future__ import annotations

from sqlglot import exp, parse_one, ParseError
from src.querystats.errors import CollectorConfigError


def validate_relation_name(name: str) -> exp.Table:
    """
    Ensure *name* is a plain, optionally schema-qualified relation.

    Relation names come from configuration and end up inside the
    statistics query, so anything beyond ``[catalog.][schema.]name`` is
    rejected.  Raises CollectorConfigError on any problem.
    """
    if not name or ";" in name:
        raise CollectorConfigError(f"Invalid relation name: {name!r}")

    try:
        tree = parse_one(name, into=exp.Table)
    except ParseError as exc:
        raise CollectorConfigError(f"Invalid relation name {name!r}: {exc}") from exc

    if not isinstance(tree, exp.Table) or tree.args.get("alias") or tree.args.get("joins"):
        raise CollectorConfigError(f"Relation {name!r} must be a plain table or view name")

    if not all(isinstance(part, exp.Identifier) for part in tree.parts):
        raise CollectorConfigError(f"Relation {name!r} must be a plain table or view name")

    return tree
