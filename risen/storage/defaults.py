"""Templates seeded into an empty database at startup."""

from typing import List

from risen.models.template import RisenTemplate

DEFAULT_TEMPLATES: List[RisenTemplate] = [
    RisenTemplate(
        name="Code Review",
        description="Comprehensive code review template",
        role="Senior software engineer with 15+ years of experience in code quality and best practices",
        instructions="Review the provided code for quality, performance, security, and maintainability",
        steps=[
            "Analyze code structure and organization",
            "Check for potential bugs and edge cases",
            "Evaluate performance implications",
            "Review security vulnerabilities",
            "Suggest improvements and best practices",
        ],
        expectations="Detailed review with specific line-by-line feedback and actionable suggestions",
        narrowing="Focus on critical issues first, then style and minor improvements",
        variables=["code_snippet", "programming_language", "context"],
        tags=["development", "code-review", "quality"],
    ),
    RisenTemplate(
        name="Blog Post Writer",
        description="SEO-optimized blog post creation",
        role="Content strategist and SEO expert with proven track record in {{industry}}",
        instructions="Write an engaging blog post about {{topic}} targeting {{audience}}",
        steps=[
            "Research keywords and current trends",
            "Create compelling headline and introduction",
            "Develop main points with examples",
            "Include relevant statistics and sources",
            "Write conclusion with call-to-action",
        ],
        expectations="1500-2000 word blog post, SEO-optimized, engaging tone, well-researched",
        narrowing="Use conversational tone, include 3-5 keywords naturally, target readability score of 60+",
        variables=["topic", "audience", "industry", "keywords"],
        tags=["content", "blog", "seo", "writing"],
    ),
    RisenTemplate(
        name="Data Analysis",
        description="Comprehensive data analysis and insights",
        role="Data scientist specializing in {{domain}} with expertise in statistical analysis",
        instructions="Analyze the {{dataset_description}} to uncover insights and patterns",
        steps=[
            "Perform exploratory data analysis",
            "Identify key trends and patterns",
            "Run statistical significance tests",
            "Create visualizations for findings",
            "Provide actionable recommendations",
        ],
        expectations="Clear insights with statistical backing, visualization suggestions, business recommendations",
        narrowing="Focus on {{specific_metrics}} and their business impact",
        variables=["domain", "dataset_description", "specific_metrics"],
        tags=["data", "analysis", "insights", "statistics"],
    ),
]
