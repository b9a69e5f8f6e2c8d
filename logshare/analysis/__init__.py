"""logshare analysis package.

Pure predicate construction, no I/O.
"""

from logshare.analysis.filter_builder import FilterBuilder, build_predicate, start_of_day

__all__ = [
    "FilterBuilder",
    "build_predicate",
    "start_of_day",
]
