"""Calendar Recurrence"""

from .expander import RecurrenceExpander, expand_recurrence, expand_events
from .validation import validate_rule, rule_error
from .description import describe_recurrence, parse_recurrence

__all__ = [
    'RecurrenceExpander',
    'expand_recurrence',
    'expand_events',
    'validate_rule',
    'rule_error',
    'describe_recurrence',
    'parse_recurrence',
]
