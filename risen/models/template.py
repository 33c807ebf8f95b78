"""
RISEN template and experiment models.

Sequence-valued fields (steps, variables, tags) are stored as JSON text and
decoded here, at the storage boundary, into typed lists.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

TEXT_FIELDS = ("role", "instructions", "expectations", "narrowing")
SEQUENCE_FIELDS = ("steps", "variables", "tags")


def decode_sequence(value: Any) -> List[str]:
    """
    Decode a sequence field that may be a list or its JSON encoding.

    Raises:
        ValueError: If the value is not a list of strings or JSON text for one
    """
    if value is None or value == "":
        return []

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"not valid JSON: {e}") from e

    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected an array, got {type(value).__name__}")

    items = list(value)
    if not all(isinstance(item, str) for item in items):
        raise ValueError("array entries must be strings")
    return items


def encode_sequence(values: Optional[List[str]]) -> str:
    return json.dumps(list(values or []))


class RisenTemplate(BaseModel):
    """A stored, parameterizable RISEN prompt template"""
    id: Optional[str] = None
    name: str = ""
    description: str = ""
    role: str = ""
    instructions: str = ""
    steps: List[str] = Field(default_factory=list)
    expectations: str = ""
    narrowing: str = ""
    variables: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    uses: int = 0
    total_rating: int = 0
    rating_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("steps", "variables", "tags", mode="before")
    @classmethod
    def _decode_sequences(cls, value: Any) -> List[str]:
        return decode_sequence(value)

    @field_validator("name", "description", "role", "instructions", "expectations", "narrowing", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def average_rating(self) -> Optional[float]:
        """Derived average; None until the template has been rated."""
        if self.rating_count > 0:
            return self.total_rating / self.rating_count
        return None

    @property
    def displayed_rating(self) -> Optional[float]:
        """Average rounded to one decimal, the value reports show and compare."""
        avg = self.average_rating
        return round(avg, 1) if avg is not None else None

    def formatted_rating(self) -> str:
        avg = self.average_rating
        return f"{avg:.1f}" if avg is not None else "N/A"

    def content_fields(self) -> Dict[str, Any]:
        """The RISEN content of the template, without counters."""
        return {
            "role": self.role,
            "instructions": self.instructions,
            "steps": list(self.steps),
            "expectations": self.expectations,
            "narrowing": self.narrowing,
            "variables": list(self.variables),
        }


class Experiment(BaseModel):
    """One recorded execution outcome of a template"""
    id: Optional[str] = None
    template_id: str
    executed_prompt: str = ""
    variables_used: Dict[str, Any] = Field(default_factory=dict)
    ai_model: str = "claude"
    response: str = ""
    rating: int = Field(..., ge=1, le=5)
    notes: str = ""
    created_at: Optional[str] = None

    @field_validator("variables_used", mode="before")
    @classmethod
    def _decode_variables_used(cls, value: Any) -> Any:
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            return json.loads(value)
        return value

    @field_validator("executed_prompt", "response", "notes", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("ai_model", mode="before")
    @classmethod
    def _default_model(cls, value: Any) -> Any:
        return value or "claude"


class RatingSummary(BaseModel):
    """Rating aggregate of a template after an update"""
    total_rating: int
    rating_count: int

    @property
    def average(self) -> float:
        return self.total_rating / self.rating_count if self.rating_count else 0.0


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    score: int = 0


class Suggestion(BaseModel):
    component: str
    suggestion: str
