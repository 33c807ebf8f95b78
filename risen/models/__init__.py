from .template import (
    Experiment,
    RatingSummary,
    RisenTemplate,
    Suggestion,
    ValidationResult,
    decode_sequence,
    encode_sequence,
)

__all__ = [
    "Experiment",
    "RatingSummary",
    "RisenTemplate",
    "Suggestion",
    "ValidationResult",
    "decode_sequence",
    "encode_sequence",
]
