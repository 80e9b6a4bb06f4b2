"""Per-type constraint validation for single answers.

A question carries two untyped bound strings, `minimum_value` and
`maximum_value`. What they mean depends on the question type code:

- Number: inclusive numeric range (invariant decimal format)
- ShortText / LongText: inclusive character-count range
- Date: inclusive calendar range, compared without time-of-day
- anything else: no constraint checking

Dispatch goes through an open code -> strategy map, so a type added as data
can be attached to an existing family with `ConstraintStrategies.register_strategy`.
Codes with no registered strategy fall through to the permissive strategy.

Bounds that do not parse are ignored when validating answers; authoring
rejects them up front through `bound_errors`.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from forms_service.models.definitions import Question
from forms_service.models.question_type import QuestionTypeCode

logger = logging.getLogger(__name__)

# Sign, digits with optional ',' group separators, optional '.' fraction.
# No exponent and no NaN/Infinity.
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d[\d,]*)?(?:\.\d*)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
# Invariant month/day/year form, e.g. 06/15/2023
_US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def parse_invariant_decimal(raw: str | None) -> Decimal | None:
    if is_blank(raw):
        return None
    text = str(raw).strip()
    if not _DECIMAL_RE.match(text) or not any(ch.isdigit() for ch in text):
        return None
    try:
        return Decimal(text.replace(",", ""))
    except InvalidOperation:
        return None


def parse_invariant_int(raw: str | None) -> int | None:
    if is_blank(raw):
        return None
    text = str(raw).strip()
    if not _INTEGER_RE.match(text):
        return None
    return int(text)


def parse_invariant_date(raw: str | None) -> date | None:
    """Parse ISO dates, ISO date-times (time dropped) or MM/DD/YYYY."""
    if is_blank(raw):
        return None
    text = str(raw).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    m = _US_DATE_RE.match(text)
    if m:
        month, day, year = (int(g) for g in m.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None
    return None


class ConstraintStrategy:
    """Permissive strategy: any non-empty value is accepted.

    Also the base for the range families. Subclasses provide `measure` (turn
    the answer into something comparable) and `parse_bound`.
    """

    family = "unconstrained"

    def __init__(
        self,
        *,
        minimum_placeholder: str = "",
        maximum_placeholder: str = "",
        minimum_help_text: str = "",
        maximum_help_text: str = "",
    ):
        self.minimum_placeholder = minimum_placeholder
        self.maximum_placeholder = maximum_placeholder
        self.minimum_help_text = minimum_help_text
        self.maximum_help_text = maximum_help_text

    def accepts(self, value: str, minimum: str | None, maximum: str | None) -> bool:
        return True

    def bound_errors(self, minimum: str | None, maximum: str | None) -> list[str]:
        return []

    def describe(self, minimum: str | None, maximum: str | None) -> str:
        return "Response is not valid for this question"

    def hints(self) -> dict[str, str]:
        return {
            "minimum_placeholder": self.minimum_placeholder,
            "maximum_placeholder": self.maximum_placeholder,
            "minimum_help_text": self.minimum_help_text,
            "maximum_help_text": self.maximum_help_text,
        }


class _RangeStrategy(ConstraintStrategy):
    # Message used by authoring when a bound does not parse
    invalid_bound_message = "is not valid"

    def measure(self, value: str) -> Any | None:  # pragma: no cover - abstract
        raise NotImplementedError

    def parse_bound(self, raw: str | None) -> Any | None:  # pragma: no cover - abstract
        raise NotImplementedError

    def format_bound(self, bound: Any) -> str:
        return str(bound)

    def accepts(self, value: str, minimum: str | None, maximum: str | None) -> bool:
        measured = self.measure(value)
        if measured is None:
            return False
        low = self.parse_bound(minimum)
        if low is not None and measured < low:
            return False
        high = self.parse_bound(maximum)
        if high is not None and measured > high:
            return False
        return True

    def bound_errors(self, minimum: str | None, maximum: str | None) -> list[str]:
        errors: list[str] = []
        low = high = None
        if not is_blank(minimum):
            low = self.parse_bound(minimum)
            if low is None:
                errors.append(f"MinimumValue '{minimum}' {self.invalid_bound_message}")
        if not is_blank(maximum):
            high = self.parse_bound(maximum)
            if high is None:
                errors.append(f"MaximumValue '{maximum}' {self.invalid_bound_message}")
        if low is not None and high is not None and low > high:
            errors.append(
                f"MinimumValue ({self.format_bound(low)}) cannot be greater than "
                f"MaximumValue ({self.format_bound(high)})"
            )
        return errors

    def describe(self, minimum: str | None, maximum: str | None) -> str:
        low = self.parse_bound(minimum)
        high = self.parse_bound(maximum)
        return self._describe_range(
            None if low is None else self.format_bound(low),
            None if high is None else self.format_bound(high),
        )

    def _describe_range(self, low: str | None, high: str | None) -> str:  # pragma: no cover - abstract
        raise NotImplementedError


class NumericRangeStrategy(_RangeStrategy):
    family = "number"
    invalid_bound_message = "is not a valid number"

    def measure(self, value: str) -> Decimal | None:
        return parse_invariant_decimal(value)

    def parse_bound(self, raw: str | None) -> Decimal | None:
        return parse_invariant_decimal(raw)

    def format_bound(self, bound: Decimal) -> str:
        return format(bound.normalize(), "f") if bound == bound.to_integral_value() else str(bound)

    def _describe_range(self, low: str | None, high: str | None) -> str:
        if low is not None and high is not None:
            return f"Value must be a number between {low} and {high}"
        if low is not None:
            return f"Value must be a number greater than or equal to {low}"
        if high is not None:
            return f"Value must be a number less than or equal to {high}"
        return "Value must be a number"


class TextLengthStrategy(_RangeStrategy):
    family = "text"
    invalid_bound_message = "must be a non-negative integer"

    def measure(self, value: str) -> int | None:
        return len(value)

    def parse_bound(self, raw: str | None) -> int | None:
        bound = parse_invariant_int(raw)
        if bound is None or bound < 0:
            return None
        return bound

    def _describe_range(self, low: str | None, high: str | None) -> str:
        if low is not None and high is not None:
            return f"Response must be between {low} and {high} characters long"
        if low is not None:
            return f"Response must be at least {low} characters long"
        if high is not None:
            return f"Response must be at most {high} characters long"
        return "Response is not valid text"


class DateRangeStrategy(_RangeStrategy):
    family = "date"
    invalid_bound_message = "is not a valid date"

    def measure(self, value: str) -> date | None:
        return parse_invariant_date(value)

    def parse_bound(self, raw: str | None) -> date | None:
        return parse_invariant_date(raw)

    def format_bound(self, bound: date) -> str:
        return bound.isoformat()

    def _describe_range(self, low: str | None, high: str | None) -> str:
        if low is not None and high is not None:
            return f"Value must be a date between {low} and {high}"
        if low is not None:
            return f"Value must be a date on or after {low}"
        if high is not None:
            return f"Value must be a date on or before {high}"
        return "Value must be a valid date (YYYY-MM-DD)"


PERMISSIVE = ConstraintStrategy()

NUMERIC_RANGE = NumericRangeStrategy(
    minimum_placeholder="18",
    maximum_placeholder="120",
    minimum_help_text="Minimum numeric value allowed",
    maximum_help_text="Maximum numeric value allowed",
)
SHORT_TEXT_LENGTH = TextLengthStrategy(
    minimum_placeholder="8 (minimum characters)",
    maximum_placeholder="50 (maximum characters)",
    minimum_help_text="Minimum number of characters required",
    maximum_help_text="Maximum number of characters allowed",
)
LONG_TEXT_LENGTH = TextLengthStrategy(
    minimum_placeholder="100 (minimum characters)",
    maximum_placeholder="5000 (maximum characters)",
    minimum_help_text="Minimum number of characters required",
    maximum_help_text="Maximum number of characters allowed",
)
DATE_RANGE = DateRangeStrategy(
    minimum_placeholder="1900-01-01",
    maximum_placeholder="2100-12-31",
    minimum_help_text="Earliest date allowed (ISO format: YYYY-MM-DD)",
    maximum_help_text="Latest date allowed (ISO format: YYYY-MM-DD)",
)


class ConstraintStrategies:
    """Open map of question type code -> ConstraintStrategy."""

    def __init__(
        self,
        strategies: Mapping[str, ConstraintStrategy] | None = None,
        *,
        default: ConstraintStrategy = PERMISSIVE,
    ):
        self._strategies: dict[str, ConstraintStrategy] = dict(strategies or {})
        self._default = default

    def register_strategy(self, code: str, strategy: ConstraintStrategy) -> None:
        self._strategies[code] = strategy

    def resolve(self, code: str | None) -> ConstraintStrategy:
        strategy = self._strategies.get(code or "")
        if strategy is None:
            logger.debug("constraints.unknown_code code=%s", code)
            return self._default
        return strategy

    def is_known(self, code: str | None) -> bool:
        return (code or "") in self._strategies

    def copy(self) -> "ConstraintStrategies":
        return ConstraintStrategies(self._strategies, default=self._default)


DEFAULT_STRATEGIES = ConstraintStrategies(
    {
        QuestionTypeCode.NUMBER: NUMERIC_RANGE,
        QuestionTypeCode.SHORT_TEXT: SHORT_TEXT_LENGTH,
        QuestionTypeCode.LONG_TEXT: LONG_TEXT_LENGTH,
        QuestionTypeCode.DATE: DATE_RANGE,
        # Known types whose answers are not range-checked here
        QuestionTypeCode.BOOLEAN: PERMISSIVE,
        QuestionTypeCode.SINGLE_CHOICE: PERMISSIVE,
        QuestionTypeCode.MULTIPLE_CHOICE: PERMISSIVE,
        QuestionTypeCode.DROPDOWN: PERMISSIVE,
        QuestionTypeCode.RANKING: PERMISSIVE,
    }
)


def validate_response_value(
    question: Question,
    response_value: str | None,
    strategies: ConstraintStrategies = DEFAULT_STRATEGIES,
) -> bool:
    """Return True when `response_value` satisfies the question's constraints.

    Empty or whitespace-only values are valid exactly when the question is
    optional, whatever its type. Choice legality (is the value one of the
    question's options) is not checked here.
    """
    if is_blank(response_value):
        return not question.is_required
    strategy = strategies.resolve(question.question_type.code)
    return strategy.accepts(str(response_value), question.minimum_value, question.maximum_value)


def describe_constraint(
    question: Question,
    strategies: ConstraintStrategies = DEFAULT_STRATEGIES,
) -> str:
    strategy = strategies.resolve(question.question_type.code)
    return strategy.describe(question.minimum_value, question.maximum_value)


def bound_errors(
    code: str,
    minimum: str | None,
    maximum: str | None,
    strategies: ConstraintStrategies = DEFAULT_STRATEGIES,
) -> list[str]:
    """Authoring-time well-formedness checks for a question's bounds."""
    if is_blank(minimum) and is_blank(maximum):
        return []
    return strategies.resolve(code).bound_errors(minimum, maximum)


def constraint_hints(code: str, strategies: ConstraintStrategies = DEFAULT_STRATEGIES) -> dict[str, str]:
    return strategies.resolve(code).hints()


def minimum_placeholder(code: str) -> str:
    return DEFAULT_STRATEGIES.resolve(code).minimum_placeholder


def maximum_placeholder(code: str) -> str:
    return DEFAULT_STRATEGIES.resolve(code).maximum_placeholder


def minimum_help_text(code: str) -> str:
    return DEFAULT_STRATEGIES.resolve(code).minimum_help_text


def maximum_help_text(code: str) -> str:
    return DEFAULT_STRATEGIES.resolve(code).maximum_help_text


__all__ = [
    "ConstraintStrategy",
    "NumericRangeStrategy",
    "TextLengthStrategy",
    "DateRangeStrategy",
    "ConstraintStrategies",
    "DEFAULT_STRATEGIES",
    "PERMISSIVE",
    "is_blank",
    "parse_invariant_decimal",
    "parse_invariant_int",
    "parse_invariant_date",
    "validate_response_value",
    "describe_constraint",
    "bound_errors",
    "constraint_hints",
    "minimum_placeholder",
    "maximum_placeholder",
    "minimum_help_text",
    "maximum_help_text",
]
