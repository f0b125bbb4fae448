"""Validation engine — declarative request schemas.

A schema is an ordered list of (field, constraint, message) rules. Every rule
is evaluated so that the caller gets the full list of violations at once,
never just the first one.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from email_validator import EmailNotValidError, validate_email

from domain.model.errors import ValidationError

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8
SEARCH_MAX_LENGTH = 50

Constraint = Callable[[str], bool]


def required(value: str) -> bool:
    """Marker constraint: the field must be present."""
    return True


def min_length(n: int) -> Constraint:
    return lambda value: len(value) >= n


def max_length(n: int) -> Constraint:
    return lambda value: len(value) <= n


def matches(pattern: re.Pattern) -> Constraint:
    return lambda value: pattern.search(value) is not None


def email_syntax(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


@dataclass(frozen=True)
class Rule:
    field: str
    constraint: Constraint
    message: str


@dataclass(frozen=True)
class Schema:
    rules: tuple[Rule, ...]
    min_fields: int = 0
    min_fields_message: str = ""

    @property
    def fields(self) -> list[str]:
        return list(dict.fromkeys(rule.field for rule in self.rules))


def _email_rules(is_required: bool) -> list[Rule]:
    rules = [Rule("email", email_syntax, "Please provide a valid email address")]
    if is_required:
        rules.insert(0, Rule("email", required, "Email is required"))
    return rules


def _name_rules(is_required: bool) -> list[Rule]:
    rules = [
        Rule("name", min_length(NAME_MIN_LENGTH), f"Name must be at least {NAME_MIN_LENGTH} characters long"),
        Rule("name", max_length(NAME_MAX_LENGTH), f"Name cannot exceed {NAME_MAX_LENGTH} characters"),
    ]
    if is_required:
        rules.insert(0, Rule("name", required, "Name is required"))
    return rules


def _password_rules(is_required: bool) -> list[Rule]:
    rules = [
        Rule(
            "password",
            min_length(PASSWORD_MIN_LENGTH),
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
        ),
        Rule(
            "password",
            matches(PASSWORD_PATTERN),
            "Password must contain at least one lowercase letter, one uppercase letter, and one number",
        ),
    ]
    if is_required:
        rules.insert(0, Rule("password", required, "Password is required"))
    return rules


CREATE_USER = Schema(
    rules=tuple(_email_rules(True) + _name_rules(True) + _password_rules(True)),
)

UPDATE_USER = Schema(
    rules=tuple(_email_rules(False) + _name_rules(False) + _password_rules(False)),
    min_fields=1,
    min_fields_message="At least one field must be provided",
)

LOGIN = Schema(
    rules=(
        *_email_rules(True),
        Rule("password", required, "Password is required"),
        Rule("password", min_length(1), "Password cannot be empty"),
    ),
)

SEARCH = Schema(
    rules=(
        Rule("name", required, "Search term is required"),
        Rule("name", min_length(1), "Search term cannot be empty"),
        Rule("name", max_length(SEARCH_MAX_LENGTH), f"Search term cannot exceed {SEARCH_MAX_LENGTH} characters"),
    ),
)


def collect_violations(schema: Schema, data: Any) -> list[str]:
    """Return every violated rule message for data, in schema order."""
    if not isinstance(data, Mapping):
        return ["Request body must be a JSON object"]

    violations: list[str] = []
    for field in schema.fields:
        rules = [rule for rule in schema.rules if rule.field == field]
        if field not in data:
            violations.extend(rule.message for rule in rules if rule.constraint is required)
            continue

        value = data[field]
        if not isinstance(value, str):
            violations.append(f'"{field}" must be a string')
            continue
        violations.extend(
            rule.message for rule in rules
            if rule.constraint is not required and not rule.constraint(value)
        )

    known = set(schema.fields)
    violations.extend(f'"{key}" is not allowed' for key in data if key not in known)

    present = sum(1 for field in schema.fields if field in data)
    if present < schema.min_fields:
        violations.append(schema.min_fields_message)
    return violations


def validate(schema: Schema, data: Any) -> dict[str, str]:
    """Validate data against schema.

    Returns:
        The known, present fields of data

    Raises:
        ValidationError: carrying every violation message
    """
    violations = collect_violations(schema, data)
    if violations:
        raise ValidationError(violations)
    return {field: data[field] for field in schema.fields if field in data}
