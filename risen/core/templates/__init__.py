"""
RISEN template logic: variable substitution, validation, scoring,
suggestions and request conversion.
"""

from .converter import convert_request
from .renderer import (
    apply_variables,
    extract_placeholders,
    find_unresolved,
    format_risen_prompt,
    substitute,
)
from .scoring import calculate_quality_score
from .suggestions import generate_enhanced_suggestions, generate_suggestions, role_example
from .validator import check_input_limits, validate_template

__all__ = [
    "apply_variables",
    "calculate_quality_score",
    "check_input_limits",
    "convert_request",
    "extract_placeholders",
    "find_unresolved",
    "format_risen_prompt",
    "generate_enhanced_suggestions",
    "generate_suggestions",
    "role_example",
    "substitute",
    "validate_template",
]
