"""
Template Rendering Engine

Variable substitution for {{name}} placeholders and formatting of the final
RISEN prompt text.
"""

import re
from typing import Any, Dict, List, Mapping

from risen.core.templates.fields import TemplateLike, parse_sequence, template_fields, text_field
from risen.models.template import RisenTemplate, TEXT_FIELDS

PLACEHOLDER_PATTERN = re.compile(r'\{\{(\w+)\}\}')


def extract_placeholders(*texts: str) -> List[str]:
    """
    Find all {{name}} placeholders across the given texts.

    Returns names deduplicated, in order of first appearance.
    """
    found: Dict[str, None] = {}
    for text in texts:
        if not text:
            continue
        for match in PLACEHOLDER_PATTERN.finditer(text):
            found.setdefault(match.group(1), None)
    return list(found)


def has_placeholder(text: str) -> bool:
    """True when the text contains a placeholder marker."""
    return "{{" in (text or "")


def substitute(text: str, name: str, value: Any) -> str:
    """Replace every literal {{name}} in text with value."""
    if not text:
        return text
    return text.replace("{{" + name + "}}", _convert_to_string(value))


def scanned_texts(template: TemplateLike) -> List[str]:
    """
    The texts searched for placeholders: the four free-text fields, then each step.

    Raises:
        MalformedTemplateError: If steps cannot be decoded
    """
    fields = template_fields(template)
    texts = [text_field(fields, name) for name in TEXT_FIELDS]
    texts.extend(parse_sequence(fields, "steps"))
    return texts


def apply_variables(template: RisenTemplate, variables: Mapping[str, Any]) -> RisenTemplate:
    """
    Substitute each variable into every free-text field and each step.

    Returns a new template; the given one is left untouched.
    """
    updates: Dict[str, Any] = {name: getattr(template, name) for name in TEXT_FIELDS}
    steps = list(template.steps)

    for name, value in variables.items():
        for field in TEXT_FIELDS:
            updates[field] = substitute(updates[field], name, value)
        steps = [substitute(step, name, value) for step in steps]

    updates["steps"] = steps
    return template.model_copy(update=updates)


def find_unresolved(template: TemplateLike) -> List[str]:
    """Placeholders still present after substitution, in order of first appearance."""
    return extract_placeholders(*scanned_texts(template))


def format_risen_prompt(template: RisenTemplate) -> str:
    """Format the template as the final prompt text."""
    numbered_steps = "\n".join(f"{i}. {step}" for i, step in enumerate(template.steps, 1))

    return (
        f"Role: {template.role}\n\n"
        f"Instructions: {template.instructions}\n\n"
        f"Steps:\n{numbered_steps}\n\n"
        f"Expectations: {template.expectations}\n\n"
        f"Narrowing: {template.narrowing}"
    )


def _convert_to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (list, tuple)):
        return ",".join(_convert_to_string(v) for v in value)
    return str(value)
