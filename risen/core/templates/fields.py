"""
Field access shared by the validator, scorer, suggestion generator and renderer.

These accept either a RisenTemplate or a raw mapping (an inline template from
a tool call), so sequence fields may still be JSON text or malformed.
"""

from typing import Any, Dict, List, Mapping, Union

from pydantic import BaseModel

from risen.models.template import decode_sequence
from risen.utils.errors import MalformedTemplateError

TemplateLike = Union[BaseModel, Mapping[str, Any]]


def template_fields(template: TemplateLike) -> Dict[str, Any]:
    if isinstance(template, BaseModel):
        return template.model_dump()
    return dict(template)


def text_field(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_sequence(fields: Mapping[str, Any], name: str) -> List[str]:
    """
    Decode a sequence field.

    Raises:
        MalformedTemplateError: If the field is not a sequence of strings
    """
    try:
        return decode_sequence(fields.get(name))
    except ValueError as e:
        raise MalformedTemplateError(f"Invalid {name} format: {e}", field=name) from e
