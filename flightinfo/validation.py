"""
Rule registry based validation for command objects.

Field rules are declared once per command type and executed generically:

    registry = RuleRegistry()
    registry.register(DeleteFlightCommand, "version", RequiresValue())
    result = registry.validate(command)

Validation is purely structural. It never touches the database.
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Dict, List, Optional, Type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldError:
    """A single failed rule for a field."""
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    """Outcome of validating a command against its registered rules."""
    errors: List[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> List[str]:
        return [error.message for error in self.errors]

    def first_error(self) -> Optional[FieldError]:
        return self.errors[0] if self.errors else None


def is_default_value(value: Any) -> bool:
    """Check whether a value is the zero/empty default for its type."""
    if value is None:
        return True
    if isinstance(value, bool):
        return value is False
    if isinstance(value, str):
        return value == ""
    if isinstance(value, int):
        return value == 0
    if isinstance(value, uuid.UUID):
        return value.int == 0
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) == datetime.min
    return False


class Rule:
    """Base class for field rules. Subclasses implement ``is_valid``."""

    message_template = "The {field} field is invalid"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message_template

    def is_valid(self, value: Any) -> bool:
        raise NotImplementedError

    def format_message(self, field_name: str) -> str:
        return self.message.format(field=field_name)

    def __repr__(self):
        return f"<{self.__class__.__name__}(message='{self.message}')>"


class RequiresValue(Rule):
    """Field must be present and not hold its type's default value."""

    message_template = "The {field} field must have a non-default value"

    def is_valid(self, value: Any) -> bool:
        return not is_default_value(value)


class MatchesPattern(Rule):
    """String field must fully match a regular expression."""

    message_template = "The {field} field has an invalid format"

    def __init__(self, pattern: str, message: Optional[str] = None):
        super().__init__(message)
        self.pattern = re.compile(pattern)

    def is_valid(self, value: Any) -> bool:
        if value is None or value == "":
            return True
        return isinstance(value, str) and self.pattern.fullmatch(value) is not None


class ExactLength(Rule):
    """String field must be exactly ``length`` characters long."""

    message_template = "The {field} field must be exactly {length} characters"

    def __init__(self, length: int, message: Optional[str] = None):
        super().__init__(message)
        self.length = length

    def is_valid(self, value: Any) -> bool:
        if value is None or value == "":
            return True
        return isinstance(value, str) and len(value) == self.length

    def format_message(self, field_name: str) -> str:
        return self.message.format(field=field_name, length=self.length)


class IsEnumMember(Rule):
    """Field must resolve to a defined member of ``enum_type``."""

    message_template = "The {field} field must be a valid {enum}"

    def __init__(self, enum_type: Type[Enum], message: Optional[str] = None):
        super().__init__(message)
        self.enum_type = enum_type

    def is_valid(self, value: Any) -> bool:
        if isinstance(value, self.enum_type):
            return True
        try:
            self.enum_type(value)
        except (ValueError, TypeError):
            return False
        return True

    def format_message(self, field_name: str) -> str:
        return self.message.format(field=field_name, enum=self.enum_type.__name__)


class InRange(Rule):
    """Numeric field must lie within ``minimum`` and ``maximum`` inclusive."""

    message_template = "The {field} field must be between {minimum} and {maximum}"

    def __init__(self, minimum: int, maximum: int, message: Optional[str] = None):
        super().__init__(message)
        self.minimum = minimum
        self.maximum = maximum

    def is_valid(self, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return self.minimum <= value <= self.maximum

    def format_message(self, field_name: str) -> str:
        return self.message.format(field=field_name, minimum=self.minimum, maximum=self.maximum)


@dataclass
class FieldRules:
    """Ordered rules for one field together with the accessor that reads it."""
    field_name: str
    accessor: Callable[[Any], Any]
    rules: List[Rule] = field(default_factory=list)


class RuleRegistry:
    """
    Mapping from command type to its per-field rule lists.

    Fields are evaluated in registration order and every rule of every field
    runs, so a result lists all failures rather than only the first one.
    """

    def __init__(self):
        self._fields: Dict[type, Dict[str, FieldRules]] = {}

    def register(self, command_type: type, field_name: str, *rules: Rule,
                 accessor: Optional[Callable[[Any], Any]] = None) -> None:
        """
        Declare rules for a field of a command type.

        Args:
            command_type: Class of the command the rules apply to
            field_name: Field identifier, also used in messages
            rules: Rules evaluated in order
            accessor: Optional callable reading the field, defaults to attribute access
        """
        fields = self._fields.setdefault(command_type, {})
        entry = fields.get(field_name)
        if entry is None:
            entry = FieldRules(field_name=field_name, accessor=accessor or attrgetter(field_name))
            fields[field_name] = entry
        entry.rules.extend(rules)

    def rules_for(self, command_type: type) -> List[FieldRules]:
        return list(self._fields.get(command_type, {}).values())

    def validate(self, command: Any) -> ValidationResult:
        """Evaluate every registered rule against the command's current values."""
        result = ValidationResult()
        for entry in self.rules_for(type(command)):
            value = entry.accessor(command)
            for rule in entry.rules:
                if not rule.is_valid(value):
                    result.errors.append(FieldError(entry.field_name, rule.format_message(entry.field_name)))

        if not result.is_valid:
            logger.debug(f"{type(command).__name__} failed validation: {result.messages}")
        return result


# Registry used by the command definitions in flightinfo.models.commands
command_rules = RuleRegistry()


__all__ = [
    'FieldError',
    'ValidationResult',
    'is_default_value',
    'Rule',
    'RequiresValue',
    'MatchesPattern',
    'ExactLength',
    'IsEnumMember',
    'InRange',
    'FieldRules',
    'RuleRegistry',
    'command_rules',
]
