"""Hand-authored documents served while the text provider is unavailable.

Each builder is deterministic: the same request always produces the same
document, already in canonical shape.
"""

from __future__ import annotations

from typing import Any

from schemas.generation import IdeaRequest, PitchDeckRequest
from services.ai.normalizer import normalize_idea, normalize_milestone, normalize_phase
from services.ai.prompts import DEFAULT_REGION


IDEA_WARNING = "AI service unavailable; showing fallback ideas."
ROADMAP_WARNING = "AI service unavailable; showing basic roadmap template."
PITCH_DECK_WARNING = (
    "AI service unavailable; showing pitch deck template. "
    "Customize with your specific details."
)
ENHANCEMENT_WARNING = "AI service unavailable; showing generic enhancement suggestions."


def fallback_ideas(request: IdeaRequest) -> dict[str, Any]:
    """Three template ideas seeded with the request's keywords and domain."""
    domain = request.domain or "General"
    region = request.region or DEFAULT_REGION
    base = request.keywords or domain
    templates = [
        {
            "title": f"{base} automation platform",
            "description": (
                "A practical tool that automates repetitive workflows in the "
                f"{domain} space for {region} teams. Ships with templates and "
                "human-in-the-loop review."
            ),
            "targetMarket": "SMBs and startups",
            "uniqueValue": "Ops-friendly setup, no-code builder, audit trails",
            "challenges": "Distribution, data access, change management",
            "marketSize": "Mid-sized and growing",
            "score": 7,
        },
        {
            "title": f"{base} insights co-pilot",
            "description": (
                "An insights layer that aggregates signals (support, CRM, product "
                f"usage) to suggest next-best-actions in {domain}."
            ),
            "targetMarket": "Product and growth teams",
            "uniqueValue": "Connectors first, fast dashboards, alerting",
            "challenges": "Data quality, integrations coverage",
            "marketSize": "Large and horizontal",
            "score": 8,
        },
        {
            "title": f"{base} marketplace",
            "description": (
                f"Curate a niche marketplace in {domain} with vetted vendors and "
                f"transparent pricing for {region} buyers."
            ),
            "targetMarket": "Procurement leads and founders",
            "uniqueValue": "Curation + buyer playbooks",
            "challenges": "Trust, supply density, take-rate sustainability",
            "marketSize": "Dependent on niche depth",
            "score": 6,
        },
    ]
    return {"ideas": [normalize_idea(t) for t in templates]}


def fallback_roadmap() -> dict[str, Any]:
    """Four-phase template with one milestone per phase."""
    phases = [
        ("Planning", "2 weeks", ["Define scope", "Set up team"]),
        ("Development", "8 weeks", ["Build MVP", "Iterate"]),
        ("Testing", "2 weeks", ["QA", "Bug fixes"]),
        ("Launch", "1 week", ["Release", "Monitor"]),
    ]
    milestones = [
        {"name": "Team kickoff", "targetDate": "Week 1"},
        {"name": "MVP ready", "targetDate": "Week 3"},
        {"name": "Testing begins", "targetDate": "Week 10"},
        {"name": "Launch", "targetDate": "Week 12"},
    ]
    return {
        "phases": [
            normalize_phase({"title": t, "duration": d, "objectives": o})
            for t, d, o in phases
        ],
        "milestones": [normalize_milestone(m) for m in milestones],
    }


def fallback_pitch_deck(request: PitchDeckRequest) -> dict[str, Any]:
    """Ten-slide outline; request fields fill the headlines where given."""
    outline = [
        ("Cover Slide", request.idea_title or "Your Startup",
         "Company name, tagline, and positioning statement"),
        ("Problem", "Problem Statement",
         request.idea_description or "The problem you are solving"),
        ("Solution", "Our Solution",
         "Your unique solution and competitive advantage"),
        ("Market Opportunity", "Market Size",
         "Total addressable market (TAM) analysis"),
        ("Business Model", request.business_model or "Revenue Model",
         "How you make money"),
        ("Competition", "Competitive Landscape",
         request.competitive_advantage or "Competitive advantage"),
        ("Go-to-Market", "Customer Acquisition", "How you will acquire customers"),
        ("Financial Projections", "3-Year Forecast",
         "Revenue projections and unit economics"),
        ("Team", "Team & Advisors", "Key team members and their experience"),
        ("Ask", request.funding_goal or "Funding Request",
         "Funding amount and use of funds"),
    ]
    return {
        "slides": [
            {
                "title": title,
                "headline": headline,
                "keyPoints": [],
                "content": content,
                "supportingData": "",
                "visualSuggestion": "",
                "type": "default",
            }
            for title, headline, content in outline
        ]
    }


def fallback_enhancement() -> dict[str, Any]:
    return {
        "strengths": ["Clear concept", "Defined market"],
        "weaknesses": ["Needs validation", "Competitive landscape unclear"],
        "suggestions": [
            "Conduct market research",
            "Define MVP features",
            "Identify key competitors",
            "Create financial projections",
            "Build prototype",
        ],
    }
