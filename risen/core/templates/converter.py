"""
Keyword-based conversion of a free-text request into RISEN components.

This is plain text splicing; no model is consulted.
"""

import re
from typing import List, Optional

from risen.models.template import RisenTemplate

ROLE_KEYWORDS = ["as a", "act as", "you are", "expert", "specialist"]
EXPECTATION_KEYWORDS = ["should be", "must include", "make sure", "i want", "need"]
NARROWING_KEYWORDS = ["focus on", "avoid", "don't", "specifically", "only"]

DEFAULT_ROLE = "Expert assistant"
DEFAULT_EXPECTATIONS = "Clear, comprehensive, and actionable output"
DEFAULT_NARROWING = "Focus on practical solutions"

ANALYSIS_STEPS = [
    "Examine the provided information thoroughly",
    "Identify key patterns and insights",
    "Draw conclusions based on analysis",
]
WRITING_STEPS = [
    "Plan the structure and key points",
    "Develop the main content",
    "Review and refine for clarity",
]
GENERIC_STEPS = [
    "Understand the requirement",
    "Process the information",
    "Provide comprehensive response",
]

SENTENCE_PATTERN = re.compile(r'[^.!?]+[.!?]?')


def extract_role(request: str) -> str:
    """Text between the first role keyword and the next period, if any."""
    lowered = request.lower()
    for keyword in ROLE_KEYWORDS:
        start = lowered.find(keyword)
        if start == -1:
            continue
        end = request.find(".", start)
        if end > start:
            role = request[start + len(keyword):end].strip()
            if role:
                return role[0].upper() + role[1:]
    return DEFAULT_ROLE


def choose_steps(request: str) -> List[str]:
    lowered = request.lower()
    if "analyze" in lowered:
        return list(ANALYSIS_STEPS)
    if "write" in lowered or "create" in lowered:
        return list(WRITING_STEPS)
    return list(GENERIC_STEPS)


def _sentences_with(request: str, keywords: List[str]) -> List[str]:
    matches = []
    for sentence in SENTENCE_PATTERN.findall(request):
        sentence = sentence.strip()
        if sentence and any(keyword in sentence.lower() for keyword in keywords):
            matches.append(sentence.rstrip("."))
    return matches


def convert_request(request: str, context: Optional[str] = None) -> RisenTemplate:
    """
    Decompose a natural-language request into a RISEN template.

    The request itself becomes the instructions. The result is not persisted.
    """
    expectations = DEFAULT_EXPECTATIONS
    stated = _sentences_with(request, EXPECTATION_KEYWORDS)
    if stated:
        expectations += ". " + ". ".join(stated)
    if context:
        expectations += f". {context}"

    constraints = _sentences_with(request, NARROWING_KEYWORDS)
    narrowing = ". ".join(constraints) if constraints else DEFAULT_NARROWING

    return RisenTemplate(
        role=extract_role(request),
        instructions=request,
        steps=choose_steps(request),
        expectations=expectations,
        narrowing=narrowing,
    )
