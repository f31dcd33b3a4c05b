"""
Recurrence Rule Validation

Rules are checked before any expansion starts. A bad rule is rejected,
never adjusted to the closest valid rule.
"""

from typing import Optional

from ..exceptions import ValidationError
from ..models import Frequency, RecurrenceRule


def rule_error(rule: RecurrenceRule) -> Optional[str]:
    """
    Check a recurrence rule.

    Args:
        rule: Rule to check

    Returns:
        A human-readable message describing the first problem found,
        or None if the rule is valid
    """
    if not isinstance(rule.frequency, Frequency):
        return f'Unknown frequency: {rule.frequency!r}'

    if rule.interval < 1:
        return 'Interval must be at least 1'

    if rule.days_of_week is not None:
        if rule.frequency == Frequency.WEEKLY and len(rule.days_of_week) == 0:
            return 'At least one day must be selected for weekly recurrence'
        if any(d < 0 or d > 6 for d in rule.days_of_week):
            return 'Invalid day of week (must be 0-6)'

    if rule.day_of_month is not None and not 1 <= rule.day_of_month <= 31:
        return 'Day of month must be between 1 and 31'

    if rule.end_date is not None and rule.count is not None:
        return 'Cannot specify both endDate and count'

    if rule.count is not None and rule.count < 1:
        return 'Count must be at least 1'

    return None


def validate_rule(rule: RecurrenceRule) -> None:
    """Raise ValidationError if the rule is invalid."""
    error = rule_error(rule)
    if error:
        raise ValidationError(error)
