"""Keyword matcher tool - overlap between resume highlights and job keywords."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class KeywordMatchInput(BaseModel):
    resume_highlights: list[str] = Field(default_factory=list, alias="resumeHighlights")
    job_keywords: list[str] = Field(default_factory=list, alias="jobKeywords")

    model_config = ConfigDict(populate_by_name=True)


def match_keywords(resume_highlights: list[str], job_keywords: list[str]) -> dict:
    """Case-insensitive match of each job keyword against resume highlights.

    A keyword matches when it is a substring of a highlight or the highlight
    is a substring of it. Returned keywords are lowercased.
    """
    keywords = [k.lower() for k in job_keywords]
    highlights = [h.lower() for h in resume_highlights]

    matched: list[str] = []
    missing: list[str] = []
    for keyword in keywords:
        if any(keyword in h or h in keyword for h in highlights):
            matched.append(keyword)
        else:
            missing.append(keyword)

    overlap = len(matched) / len(keywords) * 100 if keywords else 0.0
    return {
        "matched": matched,
        "missing": missing,
        "overlapPercentage": round(overlap, 2),
    }


def match_keywords_tool(tool_input: Any) -> dict:
    """Tool entry point; ``tool_input`` is a dict with resumeHighlights / jobKeywords.

    Raises:
        pydantic.ValidationError: Malformed input.
    """
    parsed = KeywordMatchInput.model_validate(tool_input or {})
    return match_keywords(parsed.resume_highlights, parsed.job_keywords)
