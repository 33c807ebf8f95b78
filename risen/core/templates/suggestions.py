"""
Improvement suggestions for RISEN templates.

Base suggestions look only at the template's shape; enhanced suggestions also
take its usage statistics into account. Rules are independent, so several can
fire for the same component.
"""

from typing import List

from risen.core.templates.fields import TemplateLike, parse_sequence, template_fields, text_field
from risen.core.templates.renderer import has_placeholder
from risen.core.templates.scoring import contains_number
from risen.models.template import RisenTemplate, Suggestion

PRO_TIPS = [
    'Use specific numbers in expectations (e.g., "5-7 actionable insights")',
    'Include examples in narrowing (e.g., "Avoid jargon, write at 8th grade level")',
    "Test with different variable combinations to find what works best",
]


def generate_suggestions(template: TemplateLike) -> List[Suggestion]:
    """
    Shape-based suggestions for each RISEN component.

    Raises:
        MalformedTemplateError: If steps cannot be decoded
    """
    fields = template_fields(template)
    suggestions: List[Suggestion] = []

    role = text_field(fields, "role")
    if role and len(role) < 30:
        suggestions.append(Suggestion(
            component="role",
            suggestion="Consider adding more specific expertise, years of experience, or domain knowledge to the role",
        ))

    instructions = text_field(fields, "instructions")
    if instructions and not has_placeholder(instructions):
        suggestions.append(Suggestion(
            component="instructions",
            suggestion="Consider using variables (e.g., {{topic}}) to make this template reusable",
        ))

    steps = parse_sequence(fields, "steps")
    if len(steps) < 3:
        suggestions.append(Suggestion(
            component="steps",
            suggestion="Break down the task into more detailed steps for better AI guidance",
        ))
    if any(len(step) < 20 for step in steps):
        suggestions.append(Suggestion(
            component="steps",
            suggestion="Some steps are too brief - add more detail for clarity",
        ))

    expectations = text_field(fields, "expectations")
    if expectations and not contains_number(expectations):
        suggestions.append(Suggestion(
            component="expectations",
            suggestion="Consider adding specific metrics or measurable outcomes (e.g., word count, number of examples)",
        ))

    narrowing = text_field(fields, "narrowing")
    if len(narrowing) < 20:
        suggestions.append(Suggestion(
            component="narrowing",
            suggestion="Add constraints to focus the output or creative elements to encourage innovation",
        ))

    return suggestions


def generate_enhanced_suggestions(template: RisenTemplate) -> List[str]:
    """
    Suggestions driven by ratings and usage in addition to template content.

    The average is compared after rounding to one decimal, as it is displayed.
    """
    rounded = template.displayed_rating
    enhanced: List[str] = []

    if rounded is not None and rounded < 3:
        enhanced.append(
            "Low ratings suggest the prompt may be too vague or complex. Consider simplifying."
        )

    if template.uses > 10 and (rounded is None or rounded < 4):
        enhanced.append(
            "With many uses but moderate ratings, gather user feedback to identify specific issues."
        )

    if len(template.role.split(" ")) < 8:
        enhanced.append(
            "Role is very brief. Try: 'Expert [domain] professional with [X] years experience "
            "in [specific areas], specialized in [unique skills]'"
        )

    if any(len(step.split(" ")) < 5 for step in template.steps):
        enhanced.append(
            "Some steps are too brief. Each step should be a complete, actionable instruction."
        )

    return enhanced


def role_example(role: str) -> str:
    """A before/after illustration of an expanded role."""
    expert = "" if "expert" in role else "expert "
    return (
        f'BEFORE: "{role[:50]}..."\n'
        f'AFTER: "Senior {expert}{role} with deep knowledge of industry best practices '
        f'and proven track record"'
    )
