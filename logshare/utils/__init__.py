"""logshare utilities package.

Stateless helpers with no external calls.
"""

from logshare.utils.date_utils import format_record_time, make_current_date
from logshare.utils.text import format_byte_count, indent, truncate

__all__ = [
    "make_current_date",
    "format_record_time",
    "format_byte_count",
    "truncate",
    "indent",
]
