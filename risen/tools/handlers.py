"""
RISEN tool implementations.

Every handler returns a human-readable report. Expected outcomes (validation
failures, missing templates, missing variables) are part of the report text;
anything unexpected propagates to the router.
"""

from typing import Dict, List

from risen.core.templates import (
    apply_variables,
    calculate_quality_score,
    check_input_limits,
    convert_request,
    find_unresolved,
    format_risen_prompt,
    generate_enhanced_suggestions,
    generate_suggestions,
    role_example,
    validate_template,
)
from risen.core.templates.suggestions import PRO_TIPS
from risen.models.template import Experiment, RisenTemplate, Suggestion
from risen.storage.pagination import clamp_pagination
from risen.tools.base import NOT_FOUND_MESSAGE, ToolHandler
from risen.tools.schemas import (
    AnalyzeArgs,
    ConvertArgs,
    CreateArgs,
    ExecuteArgs,
    SearchArgs,
    SuggestArgs,
    TrackArgs,
    ValidateArgs,
)
from risen.utils.logging import get_logger

logger = get_logger(__name__)

STRING_ARRAY = {"type": "array", "items": {"type": "string"}}


def _bullets(lines: List[str], indent: str = "") -> str:
    return "\n".join(f"{indent}• {line}" for line in lines)


def _component_bullets(suggestions: List[Suggestion]) -> str:
    return "\n".join(f"• [{s.component.upper()}] {s.suggestion}" for s in suggestions)


class CreateTemplateTool(ToolHandler):
    name = "risen_create"
    description = "Create a new RISEN prompt template"
    input_schema = {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Template name"},
            "description": {"type": "string", "description": "Template description"},
            "role": {"type": "string", "description": "AI role/persona"},
            "instructions": {"type": "string", "description": "Clear directives"},
            "steps": {**STRING_ARRAY, "description": "Task breakdown"},
            "expectations": {"type": "string", "description": "Desired outcome"},
            "narrowing": {"type": "string", "description": "Constraints or creative elements"},
            "variables": {**STRING_ARRAY, "description": "Template variables"},
            "tags": {**STRING_ARRAY, "description": "Tags for organization"},
        },
        "required": ["name", "role", "instructions", "steps", "expectations"],
    }
    arguments_model = CreateArgs

    async def handle(self, args: CreateArgs) -> str:
        fields = args.model_dump()
        validation = validate_template(fields)
        errors = check_input_limits(fields, self.settings) + validation.errors

        if errors:
            logger.info(f"Rejected template '{args.name}': {len(errors)} validation errors")
            return (
                "❌ Validation failed:\n" + "\n".join(errors)
                + "\n\n⚠️ Warnings:\n" + "\n".join(validation.warnings)
            )

        template_id = await self.store.create(RisenTemplate.model_validate(fields))
        logger.info(f"Created template '{args.name}' ({template_id})")

        output = "✅ RISEN template created successfully!\n\n"
        output += f"ID: {template_id}\n"
        output += f"Name: {args.name}\n"
        output += f"Quality Score: {validation.score}/100\n"
        if validation.warnings:
            output += "\n⚠️ Suggestions:\n" + "\n".join(validation.warnings)
        return output


class ValidateTemplateTool(ToolHandler):
    name = "risen_validate"
    description = "Validate a RISEN prompt structure and get improvement suggestions"
    input_schema = {
        "type": "object",
        "properties": {
            "template_id": {"type": "string", "description": "Template ID to validate"},
            "template": {
                "type": "object",
                "description": "Or provide template directly",
                "properties": {
                    "role": {"type": "string"},
                    "instructions": {"type": "string"},
                    "steps": STRING_ARRAY,
                    "expectations": {"type": "string"},
                    "narrowing": {"type": "string"},
                },
            },
        },
    }
    arguments_model = ValidateArgs

    async def handle(self, args: ValidateArgs) -> str:
        if args.template_id:
            template = await self.require_template(args.template_id)
        elif args.template is not None:
            template = args.template
        else:
            return "❌ Provide either template_id or template object"

        validation = validate_template(template)
        suggestions = generate_suggestions(template)

        sections = [
            "🔍 RISEN Validation Report",
            f"✅ Valid: {'Yes' if validation.valid else 'No'}\n"
            f"📊 Quality Score: {validation.score}/100",
        ]
        if validation.errors:
            sections.append("❌ Errors:\n" + _bullets(validation.errors))
        if validation.warnings:
            sections.append("⚠️ Warnings:\n" + _bullets(validation.warnings))
        sections.append("💡 Improvement Suggestions:\n" + _component_bullets(suggestions))
        return "\n\n".join(sections)


class ExecuteTemplateTool(ToolHandler):
    name = "risen_execute"
    description = "Execute a RISEN prompt template with variables"
    input_schema = {
        "type": "object",
        "properties": {
            "template_id": {"type": "string", "description": "Template ID"},
            "variables": {"type": "object", "description": "Variables to fill in template"},
        },
        "required": ["template_id"],
    }
    arguments_model = ExecuteArgs

    async def handle(self, args: ExecuteArgs) -> str:
        template = await self.require_template(args.template_id)

        final = template
        if args.variables:
            final = apply_variables(template, args.variables)

        missing = find_unresolved(final)
        if missing:
            logger.debug(f"Template {template.id} is missing variables: {missing}")
            return (
                f"⚠️ Missing variables: {', '.join(missing)}\n\n"
                "Please provide values for all variables."
            )

        prompt = format_risen_prompt(final)
        uses = await self.store.increment_use(template.id)
        if uses is None:
            return NOT_FOUND_MESSAGE

        return (
            f"📝 RISEN Prompt Ready:\n\n{prompt}\n\n"
            f'✅ Template "{template.name}" executed ({uses} total uses)'
        )


class TrackExperimentTool(ToolHandler):
    name = "risen_track"
    description = "Track the results of a RISEN prompt execution"
    input_schema = {
        "type": "object",
        "properties": {
            "template_id": {"type": "string", "description": "Template ID"},
            "executed_prompt": {"type": "string", "description": "The executed prompt"},
            "variables_used": {"type": "object", "description": "Variables that were used"},
            "ai_model": {"type": "string", "description": "Which AI model was used"},
            "response": {"type": "string", "description": "AI response (truncated if needed)"},
            "rating": {"type": "integer", "minimum": 1, "maximum": 5, "description": "Rating 1-5"},
            "notes": {"type": "string", "description": "Additional notes"},
        },
        "required": ["template_id", "rating"],
    }
    arguments_model = TrackArgs

    async def handle(self, args: TrackArgs) -> str:
        template = await self.require_template(args.template_id)

        experiment = Experiment(
            template_id=template.id,
            executed_prompt=args.executed_prompt,
            variables_used=args.variables_used,
            ai_model=args.ai_model or "claude",
            # Stored responses are truncated
            response=args.response[:self.settings.experiment_response_cap],
            rating=args.rating,
            notes=args.notes,
        )
        experiment_id, summary = await self.store.record_experiment(experiment)
        if summary is None:
            return NOT_FOUND_MESSAGE
        logger.info(f"Tracked experiment {experiment_id} for template {template.id} (rating {args.rating})")

        output = "📊 Experiment tracked!\n\n"
        output += f"Template: {template.name}\n"
        output += f"Rating: {'⭐' * args.rating}\n"
        output += f"Average Rating: {summary.average:.1f} ({summary.rating_count} ratings)\n"
        output += f"AI Model: {experiment.ai_model}\n"
        if args.notes:
            output += f"Notes: {args.notes}"
        return output


class SearchTemplatesTool(ToolHandler):
    name = "risen_search"
    description = "Search for RISEN templates with pagination support"
    input_schema = {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Search query"},
            "tags": {**STRING_ARRAY, "description": "Filter by tags"},
            "min_rating": {"type": "number", "description": "Minimum average rating"},
            "offset": {
                "type": "integer", "minimum": 0, "default": 0,
                "description": "Pagination offset (starting record)",
            },
            "limit": {
                "type": "integer", "minimum": 1, "maximum": 100, "default": 20,
                "description": "Number of results per page (max 100)",
            },
        },
    }
    arguments_model = SearchArgs

    async def handle(self, args: SearchArgs) -> str:
        offset, limit = clamp_pagination(
            args.offset, args.limit,
            self.settings.search_default_limit, self.settings.search_max_limit,
        )
        page = await self.store.search(
            query=args.query,
            tags=args.tags,
            min_rating=args.min_rating,
            offset=offset,
            limit=limit,
        )

        if not page.items and page.total_count == 0:
            return "❌ No templates found matching your criteria"

        results = "\n\n".join(
            f"📝 {t.name} (ID: {t.id})\n"
            f"   {t.description}\n"
            f"   ⭐ Rating: {t.formatted_rating()} | 🔧 Uses: {t.uses} | 🏷️ Tags: {', '.join(t.tags)}"
            for t in page.items
        )

        output = f"🔍 Found {page.total_count} templates (showing {len(page.items)}):\n\n"
        output += f"{results}\n\n"
        output += (
            f"📄 Page {page.current_page} of {page.total_pages} | "
            f"Showing {page.first_index}-{page.last_index} of {page.total_count} results"
        )
        if page.has_more:
            output += f"\n\n➡️ Use offset: {page.next_offset} for next page"
        return output


class AnalyzeTemplateTool(ToolHandler):
    name = "risen_analyze"
    description = "Analyze template performance and get insights with pagination"
    input_schema = {
        "type": "object",
        "properties": {
            "template_id": {"type": "string", "description": "Template ID to analyze"},
            "offset": {
                "type": "integer", "minimum": 0, "default": 0,
                "description": "Pagination offset for experiments",
            },
            "limit": {
                "type": "integer", "minimum": 1, "maximum": 50, "default": 10,
                "description": "Number of experiments per page (max 50)",
            },
        },
        "required": ["template_id"],
    }
    arguments_model = AnalyzeArgs

    async def handle(self, args: AnalyzeArgs) -> str:
        template = await self.require_template(args.template_id)
        offset, limit = clamp_pagination(
            args.offset, args.limit,
            self.settings.experiments_default_limit, self.settings.experiments_max_limit,
        )
        page = await self.store.experiments_for(template.id, offset=offset, limit=limit)

        # Per-model averages over the experiments on this page
        model_stats: Dict[str, List[int]] = {}
        for experiment in page.items:
            model_stats.setdefault(experiment.ai_model or "claude", []).append(experiment.rating)
        model_analysis = "\n   ".join(
            f"{model}: {sum(ratings) / len(ratings):.1f} avg ({len(ratings)} uses)"
            for model, ratings in model_stats.items()
        )

        notes = [experiment.notes for experiment in page.items if experiment.notes]
        feedback = _bullets(notes[:3], indent="   ") if notes else "   No feedback notes yet"

        avg = template.displayed_rating
        recommendations = []
        if avg is not None and avg < 3:
            recommendations.append("   • Consider refining the prompt structure")
        if template.uses < 5:
            recommendations.append("   • Need more usage data for reliable insights")
        if len(notes) < 3:
            recommendations.append("   • Encourage users to leave feedback notes")
        if page.has_more:
            recommendations.append(f"\n➡️ Use offset: {page.next_offset} to see more experiments")

        output = f"📊 Template Analysis: {template.name}\n\n"
        output += "📈 Overall Performance:\n"
        output += f"   Total Uses: {template.uses}\n"
        output += f"   Average Rating: {template.formatted_rating()} ⭐\n"
        output += f"   Total Ratings: {template.rating_count}\n"
        output += f"   Total Experiments: {page.total_count}\n\n"
        output += "🤖 Performance by AI Model:\n"
        output += f"   {model_analysis or 'No model-specific data yet'}\n\n"
        output += f"💬 Recent Feedback (Page {page.current_page} of {max(page.total_pages, 1)}):\n"
        output += f"{feedback}\n\n"
        output += f"🎯 Quality Score: {calculate_quality_score(template)}/100\n\n"
        output += "💡 Recommendations:\n"
        output += "\n".join(recommendations)
        return output


class SuggestImprovementsTool(ToolHandler):
    name = "risen_suggest"
    description = "Get AI-powered suggestions to improve a RISEN prompt"
    input_schema = {
        "type": "object",
        "properties": {
            "template_id": {"type": "string", "description": "Template ID"},
        },
        "required": ["template_id"],
    }
    arguments_model = SuggestArgs

    async def handle(self, args: SuggestArgs) -> str:
        template = await self.require_template(args.template_id)

        validation = validate_template(template)
        suggestions = generate_suggestions(template)
        enhanced = generate_enhanced_suggestions(template)

        output = f'🎯 AI-Powered Suggestions for "{template.name}"\n\n'
        output += "📊 Current Performance:\n"
        output += f"   Quality Score: {validation.score}/100\n"
        output += f"   Average Rating: {template.formatted_rating()} ⭐\n"
        output += f"   Total Uses: {template.uses}\n\n"
        output += "💡 Component Improvements:\n"
        output += f"{_component_bullets(suggestions)}\n\n"
        output += "🚀 Enhanced Suggestions:\n"
        output += f"{_bullets(enhanced)}\n\n"
        output += "📝 Example Improvements:\n\n"
        output += f"{role_example(template.role)}\n\n"
        output += "🎨 Pro Tips:\n"
        output += _bullets(PRO_TIPS)
        return output


class ConvertRequestTool(ToolHandler):
    name = "risen_convert"
    description = "Convert a natural language request into RISEN format"
    input_schema = {
        "type": "object",
        "properties": {
            "request": {"type": "string", "description": "Natural language request"},
            "context": {"type": "string", "description": "Additional context"},
        },
        "required": ["request"],
    }
    arguments_model = ConvertArgs

    async def handle(self, args: ConvertArgs) -> str:
        converted = convert_request(args.request, args.context)
        steps = "\n".join(f"{i}. {step}" for i, step in enumerate(converted.steps, 1))

        output = "🔄 Converted to RISEN format:\n\n"
        output += f"**Role**: {converted.role}\n\n"
        output += f"**Instructions**: {converted.instructions}\n\n"
        output += f"**Steps**:\n{steps}\n\n"
        output += f"**Expectations**: {converted.expectations}\n\n"
        output += f"**Narrowing**: {converted.narrowing}\n\n"
        output += "💡 Tips for improvement:\n"
        output += _bullets([
            "Refine the role to be more specific to your domain",
            "Add more detailed steps based on your workflow",
            "Include measurable expectations (e.g., word count, format)",
            "Adjust narrowing to focus on your priorities",
        ])
        output += "\n\nWould you like to save this as a template?"
        return output


ALL_TOOLS = [
    CreateTemplateTool,
    ValidateTemplateTool,
    ExecuteTemplateTool,
    TrackExperimentTool,
    SearchTemplatesTool,
    AnalyzeTemplateTool,
    SuggestImprovementsTool,
    ConvertRequestTool,
]
