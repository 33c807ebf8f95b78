"""
Template Validation Engine

Structural validation of RISEN templates: hard errors for missing or too-short
required components, soft warnings for weak structure and variable mismatches,
and input-size limits applied before a template is stored.
"""

from typing import Any, List, Mapping, Optional

from risen.config.settings import RisenSettings, get_settings
from risen.core.templates.fields import TemplateLike, parse_sequence, template_fields, text_field
from risen.core.templates.renderer import extract_placeholders
from risen.core.templates.scoring import calculate_quality_score
from risen.models.template import TEXT_FIELDS, ValidationResult
from risen.utils.errors import MalformedTemplateError

MIN_ROLE_LENGTH = 10
MIN_INSTRUCTIONS_LENGTH = 20
MIN_EXPECTATIONS_LENGTH = 15
MIN_NARROWING_LENGTH = 10
MIN_STEPS = 2


def validate_template(template: TemplateLike) -> ValidationResult:
    """
    Validate a template's RISEN structure.

    The result is valid iff there are no errors; warnings never affect validity.
    The score comes from calculate_quality_score, except that steps which cannot
    be decoded score 0 overall; that case is always reported as an error.
    """
    fields = template_fields(template)
    errors: List[str] = []
    warnings: List[str] = []

    if len(text_field(fields, "role").strip()) < MIN_ROLE_LENGTH:
        errors.append(
            "Role must be at least 10 characters and clearly define the AI's persona"
        )

    if len(text_field(fields, "instructions").strip()) < MIN_INSTRUCTIONS_LENGTH:
        errors.append(
            "Instructions must be at least 20 characters and provide clear directives"
        )

    steps: List[str] = []
    steps_malformed = False
    try:
        steps = parse_sequence(fields, "steps")
    except MalformedTemplateError:
        steps_malformed = True
        errors.append("Steps must be a valid JSON array")

    if len(steps) < MIN_STEPS:
        warnings.append("Consider adding more steps for better task breakdown")

    if len(text_field(fields, "expectations").strip()) < MIN_EXPECTATIONS_LENGTH:
        errors.append(
            "Expectations must clearly define the desired outcome (min 15 chars)"
        )

    if len(text_field(fields, "narrowing").strip()) < MIN_NARROWING_LENGTH:
        warnings.append(
            "Narrowing/Novelty helps focus or expand the task - consider adding constraints or creative elements"
        )

    used = extract_placeholders(*(text_field(fields, name) for name in TEXT_FIELDS), *steps)

    declared: List[str] = []
    try:
        declared = parse_sequence(fields, "variables")
    except MalformedTemplateError:
        if used:
            errors.append("Variables must be a valid JSON array")

    declared_set = set(declared)
    for name in used:
        if name not in declared_set:
            warnings.append(f"Variable {{{{{name}}}}} is used but not declared")

    used_set = set(used)
    for name in dict.fromkeys(declared):
        if name not in used_set:
            warnings.append(f"Variable {{{{{name}}}}} is declared but not used")

    score = 0 if steps_malformed else calculate_quality_score(fields)

    return ValidationResult(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        score=score,
    )


def check_input_limits(
    fields: Mapping[str, Any],
    settings: Optional[RisenSettings] = None,
) -> List[str]:
    """
    Check a new template's fields against the configured size ceilings.

    Returns one error message per exceeded limit.
    """
    settings = settings or get_settings()
    errors: List[str] = []

    text_limits = [
        ("name", settings.max_template_name_length),
        ("description", settings.max_description_length),
        ("role", settings.max_individual_field_size),
        ("instructions", settings.max_instructions_length),
        ("expectations", settings.max_expectations_length),
        ("narrowing", settings.max_narrowing_length),
    ]
    total_size = 0
    for name, limit in text_limits:
        length = len(text_field(fields, name))
        total_size += length
        if length > limit:
            errors.append(f"{name.capitalize()} exceeds the maximum length of {limit} characters")

    steps = list(fields.get("steps") or [])
    if len(steps) > settings.max_steps_count:
        errors.append(f"Too many steps (max {settings.max_steps_count})")
    for i, step in enumerate(steps, 1):
        total_size += len(step)
        if len(step) > settings.max_individual_field_size:
            errors.append(
                f"Step {i} exceeds the maximum length of {settings.max_individual_field_size} characters"
            )

    if len(fields.get("variables") or []) > settings.max_variables_count:
        errors.append(f"Too many variables (max {settings.max_variables_count})")

    if len(fields.get("tags") or []) > settings.max_tags_count:
        errors.append(f"Too many tags (max {settings.max_tags_count})")

    if total_size > settings.max_template_size:
        errors.append(f"Template exceeds the maximum total size of {settings.max_template_size} characters")

    return errors
