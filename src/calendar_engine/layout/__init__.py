"""Calendar Layout"""

from .grouper import OverlapGrouper, Span
from .packer import ColumnPacker, assign_columns
from .resolver import LayoutResolver, layout_day, events_for_day, get_event_layout
from .all_day import pack_all_day, lane_count

__all__ = [
    'OverlapGrouper',
    'Span',
    'ColumnPacker',
    'assign_columns',
    'LayoutResolver',
    'layout_day',
    'events_for_day',
    'get_event_layout',
    'pack_all_day',
    'lane_count',
]
