"""
Alert rule validation and Prometheus rule file rendering.
"""

import logging
import re
from collections import OrderedDict
from typing import Any, Dict, List, Optional

import yaml
from pydantic import AliasChoices, BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from snmp_platform.core.errors import describe_validation_errors

logger = logging.getLogger(__name__)

SEVERITIES = ("info", "warning", "critical")

# Prometheus duration, e.g. 30s, 5m, 1h30m
DURATION_PATTERN = re.compile(r"^(\d+(ms|s|m|h|d|w|y))+$")

_BRACKET_PAIRS = {")": "(", "]": "[", "}": "{"}


class AlertRule(BaseModel):
    """
    An alert rule as sent by the dashboard.

    The expression may arrive as ``finalPromql`` (parameters already
    substituted), ``promql``, ``expr`` or ``expression``.
    """

    name: str = ""
    expr: str = Field(
        default="",
        validation_alias=AliasChoices("finalPromql", "promql", "expr", "expression"),
    )
    duration: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("for", "duration", "defaultDuration"),
    )
    severity: str = "warning"
    category: str = "default"
    summary: Optional[str] = None
    description: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)

    class Config:
        extra = "ignore"


def check_brackets(expr: str) -> Optional[str]:
    """Return a message describing the first bracket mismatch, or None."""
    stack: List[str] = []
    for char in expr:
        if char in "([{":
            stack.append(char)
        elif char in _BRACKET_PAIRS:
            if not stack:
                return f"unbalanced brackets: unexpected '{char}'"
            if stack[-1] != _BRACKET_PAIRS[char]:
                return f"unbalanced brackets: '{stack[-1]}' closed by '{char}'"
            stack.pop()
    if stack:
        return "unbalanced brackets: missing closing bracket"
    return None


def validate_rule(rule: AlertRule) -> List[str]:
    """Check one rule; returns a list of problems (empty when valid)."""
    errors: List[str] = []

    if not rule.name.strip():
        errors.append("name is required")

    if not rule.expr.strip():
        errors.append("expression is required")
    else:
        bracket_error = check_brackets(rule.expr)
        if bracket_error:
            errors.append(bracket_error)

    if rule.duration is not None and not DURATION_PATTERN.match(rule.duration.strip()):
        errors.append(f"invalid duration '{rule.duration}'")

    if rule.severity not in SEVERITIES:
        errors.append(f"severity must be one of: {', '.join(SEVERITIES)}")

    return errors


def validate_rules(raw_rules: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Validate a list of raw rule dictionaries.

    Returns:
        One ``{index, name, errors}`` entry per invalid rule
    """
    failures: List[Dict[str, Any]] = []
    for index, raw in enumerate(raw_rules):
        if not isinstance(raw, dict):
            failures.append({"index": index, "name": None, "errors": ["rule must be an object"]})
            continue
        try:
            rule = AlertRule.model_validate(raw)
        except PydanticValidationError as e:
            failures.append(
                {
                    "index": index,
                    "name": raw.get("name") if isinstance(raw.get("name"), str) else None,
                    "errors": [describe_validation_errors(e.errors())],
                }
            )
            continue
        errors = validate_rule(rule)
        if errors:
            failures.append({"index": index, "name": rule.name or None, "errors": errors})
    return failures


def _group_name(category: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", category.lower()).strip("_")
    return f"{slug or 'default'}_alerts"


def build_rule_groups(rules: List[AlertRule]) -> Dict[str, Any]:
    """Group rules by category into a Prometheus ``groups`` document."""
    grouped: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()

    for rule in rules:
        entry: Dict[str, Any] = {"alert": rule.name, "expr": rule.expr}
        if rule.duration:
            entry["for"] = rule.duration
        entry["labels"] = {"severity": rule.severity, **rule.labels}

        annotations = dict(rule.annotations)
        if rule.summary:
            annotations.setdefault("summary", rule.summary)
        if rule.description:
            annotations.setdefault("description", rule.description)
        if annotations:
            entry["annotations"] = annotations

        grouped.setdefault(_group_name(rule.category), []).append(entry)

    return {"groups": [{"name": name, "rules": entries} for name, entries in grouped.items()]}


def render_prometheus_rules(rules: List[AlertRule]) -> str:
    """Render rules as a Prometheus rule file."""
    document = build_rule_groups(rules)
    logger.debug(f"Rendering {len(rules)} rule(s) in {len(document['groups'])} group(s)")
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True, default_flow_style=False)
