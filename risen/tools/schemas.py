"""
Argument models for the RISEN tools.

Each tool call's argument object is validated against one of these models
before the handler runs. Pagination arguments are left loosely typed because
non-numeric values fall back to the tool's default page size.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _empty_if_none(value: Any) -> Any:
    return "" if value is None else value


class CreateArgs(ToolArguments):
    name: str
    description: str = ""
    role: str
    instructions: str
    steps: List[str]
    expectations: str
    narrowing: str = ""
    variables: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    blank_optional_text = field_validator("description", "narrowing", mode="before")(_empty_if_none)

    @field_validator("variables", "tags", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


class InlineTemplate(ToolArguments):
    """A template supplied directly to risen_validate"""
    role: str = ""
    instructions: str = ""
    steps: List[str] = Field(default_factory=list)
    expectations: str = ""
    narrowing: str = ""
    variables: List[str] = Field(default_factory=list)

    blank_text = field_validator(
        "role", "instructions", "expectations", "narrowing", mode="before"
    )(_empty_if_none)

    @field_validator("steps", "variables", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


class ValidateArgs(ToolArguments):
    template_id: Optional[str] = None
    template: Optional[InlineTemplate] = None


class ExecuteArgs(ToolArguments):
    template_id: str
    variables: Optional[Dict[str, Any]] = None


class TrackArgs(ToolArguments):
    template_id: str
    executed_prompt: str = ""
    variables_used: Dict[str, Any] = Field(default_factory=dict)
    ai_model: Optional[str] = None
    response: str = ""
    rating: int = Field(..., ge=1, le=5)
    notes: str = ""

    blank_optional_text = field_validator(
        "executed_prompt", "response", "notes", mode="before"
    )(_empty_if_none)

    @field_validator("variables_used", mode="before")
    @classmethod
    def _none_to_dict(cls, value: Any) -> Any:
        return {} if value is None else value


class SearchArgs(ToolArguments):
    query: Optional[str] = None
    tags: Optional[List[str]] = None
    min_rating: Optional[float] = None
    offset: Any = None
    limit: Any = None


class AnalyzeArgs(ToolArguments):
    template_id: str
    offset: Any = None
    limit: Any = None


class SuggestArgs(ToolArguments):
    template_id: str


class ConvertArgs(ToolArguments):
    request: str
    context: Optional[str] = None
