"""
Recurrence Descriptions - Human-readable text for recurrence rules

Renders rules as short phrases and reads those phrases back:
- "Daily", "Every 3 days"
- "Weekly on Mon, Wed"
- "Every 2 months on day 31 for 6 occurrences"
- "Yearly until 2027-06-30"

End dates are written in ISO form so no locale is involved.
"""

import re
from typing import List, Optional

from ..exceptions import ValidationError
from ..models import Frequency, RecurrenceRule, parse_date_value
from .validation import validate_rule

DAY_NAMES = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']

FULL_DAY_NAMES = {
    'sunday': 0, 'monday': 1, 'tuesday': 2, 'wednesday': 3,
    'thursday': 4, 'friday': 5, 'saturday': 6,
}

FREQUENCY_WORDS = {
    Frequency.DAILY: ('Daily', 'day'),
    Frequency.WEEKLY: ('Weekly', 'week'),
    Frequency.MONTHLY: ('Monthly', 'month'),
    Frequency.YEARLY: ('Yearly', 'year'),
}

# Word to number mapping for text numbers
WORD_TO_NUM = {
    'one': 1, 'two': 2, 'three': 3, 'four': 4, 'five': 5,
    'six': 6, 'seven': 7, 'eight': 8, 'nine': 9, 'ten': 10,
    'other': 2,
}


def describe_recurrence(rule: RecurrenceRule) -> str:
    """
    Create a human-readable description of a recurrence rule.

    Args:
        rule: Rule to describe

    Returns:
        Description such as "Every 2 weeks on Mon, Wed for 10 occurrences"

    Raises:
        ValidationError: If the rule is invalid
    """
    validate_rule(rule)
    adverb, unit = FREQUENCY_WORDS[rule.frequency]
    parts: List[str] = []

    if rule.interval == 1:
        parts.append(adverb)
    else:
        parts.append(f'Every {rule.interval} {unit}s')

    if rule.frequency == Frequency.WEEKLY and rule.days_of_week:
        days = ', '.join(DAY_NAMES[d] for d in rule.days_of_week)
        parts.append(f'on {days}')

    if rule.frequency == Frequency.MONTHLY and rule.day_of_month:
        parts.append(f'on day {rule.day_of_month}')

    if rule.end_date is not None:
        parts.append(f'until {rule.end_date.isoformat()}')
    elif rule.count:
        parts.append(f"for {rule.count} occurrence{'s' if rule.count != 1 else ''}")

    return ' '.join(parts)


def parse_recurrence(text: str) -> RecurrenceRule:
    """
    Derive a recurrence rule from a description.

    Accepts the phrases produced by describe_recurrence plus a few natural
    variants ("every two weeks", "every other day", "on Monday and Friday",
    "for 5 times").

    Args:
        text: Description to parse

    Returns:
        The described RecurrenceRule

    Raises:
        ValidationError: If the text does not describe a recurrence
    """
    message = text.strip().lower()
    if not message:
        raise ValidationError('Empty recurrence description')

    frequency, interval = _parse_frequency(message)
    if frequency is None:
        raise ValidationError(f'Could not understand recurrence: {text!r}')

    days_of_week = None
    day_of_month = None

    day_match = re.search(r'\bon\s+day\s+(\d{1,2})\b', message)
    if day_match:
        day_of_month = int(day_match.group(1))
    elif frequency == Frequency.WEEKLY:
        days_match = re.search(r'\bon\s+(.+?)(?:\s+until\b|\s+for\b|$)', message)
        if days_match:
            days_of_week = _parse_day_list(days_match.group(1))

    end_date = None
    count = None

    until_match = re.search(r'\buntil\s+(\S+)', message)
    if until_match:
        # Lowercasing turned the ISO 'T' separator into 't'.
        end_date = parse_date_value(until_match.group(1).upper())

    count_match = re.search(r'\bfor\s+(\d+|' + '|'.join(WORD_TO_NUM) + r')\s+(?:occurrences?|times?)\b', message)
    if count_match:
        count = _to_number(count_match.group(1))

    return RecurrenceRule(
        frequency=frequency,
        interval=interval,
        days_of_week=days_of_week,
        day_of_month=day_of_month,
        end_date=end_date,
        count=count,
    )


def _parse_frequency(message: str):
    """Return (frequency, interval) or (None, None)."""
    for frequency, (adverb, unit) in FREQUENCY_WORDS.items():
        if message.startswith(adverb.lower()):
            return frequency, 1

    every_match = re.match(r'every\s+(?:(\d+|[a-z]+)\s+)?(day|week|month|year)s?\b', message)
    if not every_match:
        return None, None

    amount, unit = every_match.groups()
    frequency = next(f for f, (_, u) in FREQUENCY_WORDS.items() if u == unit)
    interval = _to_number(amount) if amount else 1
    return frequency, interval


def _parse_day_list(fragment: str) -> Optional[tuple]:
    days = []
    for token in re.split(r'\s*(?:,|\band\b|&)\s*', fragment):
        token = token.strip()
        if not token:
            continue
        day = _day_number(token)
        if day is None:
            raise ValidationError(f'Unknown day of week: {token!r}')
        if day not in days:
            days.append(day)
    return tuple(days) if days else None


def _day_number(token: str) -> Optional[int]:
    if token in FULL_DAY_NAMES:
        return FULL_DAY_NAMES[token]
    for index, name in enumerate(DAY_NAMES):
        if token == name.lower():
            return index
    return None


def _to_number(token: str) -> int:
    if token.isdigit():
        return int(token)
    if token in WORD_TO_NUM:
        return WORD_TO_NUM[token]
    raise ValidationError(f'Unknown number: {token!r}')
