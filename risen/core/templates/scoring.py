"""
Quality scoring for RISEN templates.

Five dimensions worth up to 20 points each. Length checks use the raw field
text; the validator trims before measuring, the scorer does not.
"""

import re

from risen.core.templates.fields import TemplateLike, parse_sequence, template_fields, text_field
from risen.core.templates.renderer import has_placeholder

MAX_SCORE = 100
NARROWING_KEYWORDS = ("avoid", "focus")
NUMBER_PATTERN = re.compile(r'\d+')


def calculate_quality_score(template: TemplateLike) -> int:
    """
    Compute the 0-100 quality score of a template.

    Raises:
        MalformedTemplateError: If steps cannot be decoded
    """
    fields = template_fields(template)
    score = 0

    # Role quality
    role = text_field(fields, "role")
    if len(role) > 30:
        score += 10
    if len(role) > 50:
        score += 10

    # Instructions clarity
    instructions = text_field(fields, "instructions")
    if len(instructions) > 50:
        score += 10
    if has_placeholder(instructions):
        score += 10

    # Steps detail
    steps = parse_sequence(fields, "steps")
    if len(steps) >= 3:
        score += 10
    if len(steps) >= 5:
        score += 10

    # Expectations specificity
    expectations = text_field(fields, "expectations")
    if len(expectations) > 40:
        score += 10
    if contains_number(expectations):
        score += 10

    # Narrowing focus
    narrowing = text_field(fields, "narrowing")
    if len(narrowing) > 30:
        score += 10
    if any(keyword in narrowing for keyword in NARROWING_KEYWORDS):
        score += 10

    return min(score, MAX_SCORE)


def contains_number(text: str) -> bool:
    return bool(NUMBER_PATTERN.search(text or ""))
