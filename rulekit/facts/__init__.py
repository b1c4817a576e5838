"""
Facts package.

Provides the data context that binds fact objects to names and the path
resolver used to read, write and call into them.
"""

from rulekit.facts.context import DataContext, new_data_context
from rulekit.facts.types import (
    Kind,
    TypeDescriptor,
    descriptor_for_annotation,
    descriptor_for_value,
    kind_of_annotation,
    kind_of_value,
)

__all__ = [
    # Context
    "DataContext",
    "new_data_context",
    # Types
    "Kind",
    "TypeDescriptor",
    "kind_of_value",
    "kind_of_annotation",
    "descriptor_for_value",
    "descriptor_for_annotation",
]
