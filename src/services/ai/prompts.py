"""Prompt templates and retrieval queries for each generation kind."""

from __future__ import annotations

import json

from schemas.generation import (
    EnhancementRequest,
    IdeaRequest,
    PitchDeckRequest,
    RoadmapRequest,
)


DEFAULT_REGION = "Global"
DEFAULT_TIMELINE = "6 months"
DEFAULT_TEAM_SIZE = "Small (3-5 people)"
DEFAULT_BUDGET = "Bootstrapped"
TO_BE_DEFINED = "To be defined"
DEFAULT_FUNDING_GOAL = "$500K seed round"
DEFAULT_FOCUS_AREA = "General improvement"


# --------------------------------------------------------------------------- #
# Retrieval queries
# --------------------------------------------------------------------------- #
def idea_query(request: IdeaRequest) -> str:
    return (
        f"business ideas for {request.domain} domain "
        f"with keywords: {request.keywords}"
    )


def roadmap_query(request: RoadmapRequest) -> str:
    return (
        f"project roadmap planning for {request.idea_title} "
        f"with timeline {request.timeline}"
    )


def pitch_deck_query(request: PitchDeckRequest) -> str:
    return f"pitch deck content for {request.idea_title} startup fundraising"


def enhancement_query(request: EnhancementRequest) -> str:
    return f"enhance business idea: {request.idea.title}"


# --------------------------------------------------------------------------- #
# Prompts
# --------------------------------------------------------------------------- #
def idea_prompt(request: IdeaRequest, context: str) -> str:
    optional = []
    if request.trends:
        optional.append(f"Current Trends: {json.dumps(request.trends)}")
    if request.constraints:
        optional.append(f"Constraints/Requirements: {request.constraints}")
    extra = "\n".join(optional)

    return f"""Generate 5 innovative business ideas based on the following:

Domain: {request.domain}
Keywords: {request.keywords}
Region: {request.region or DEFAULT_REGION}
{extra}

Context from knowledge base:
{context}

For each idea, provide:
1. Title (catchy and descriptive)
2. Description (2-3 sentences explaining the concept)
3. Target Market (who would use this)
4. Unique Value Proposition (what makes it special)
5. Potential Challenges
6. Estimated Market Size
7. Innovation Score (1-10)

Format the response as a JSON array of idea objects."""


def roadmap_prompt(request: RoadmapRequest, context: str) -> str:
    return f"""Create a detailed project roadmap for the following business idea:

Title: {request.idea_title}
Description: {request.idea_description}
Timeline: {request.timeline or DEFAULT_TIMELINE}
Team Size: {request.team_size or DEFAULT_TEAM_SIZE}
Budget: {request.budget or DEFAULT_BUDGET}

Context from knowledge base:
{context}

Generate a comprehensive roadmap with:

1. **Phases**: Break down into 4-6 major phases (e.g., Planning, MVP Development, \
Testing, Launch, Growth)

2. **For each phase, include:**
   - Phase name and duration
   - Key objectives
   - Deliverables/Milestones
   - Required resources
   - Success metrics
   - Potential risks

3. **Key Milestones**: List 8-10 critical milestones with target dates

4. **Resource Allocation**: Breakdown by role/function

5. **Dependencies**: Critical path items

6. **Risk Management**: Top 5 risks and mitigation strategies

Format as a structured JSON object with phases, milestones, resources, and risks."""


def pitch_deck_prompt(request: PitchDeckRequest, context: str) -> str:
    return f"""Create compelling pitch deck content for the following startup:

Title: {request.idea_title}
Description: {request.idea_description}
Target Market: {request.target_market or TO_BE_DEFINED}
Business Model: {request.business_model or TO_BE_DEFINED}
Competitive Advantage: {request.competitive_advantage or TO_BE_DEFINED}
Funding Goal: {request.funding_goal or DEFAULT_FUNDING_GOAL}

Context from knowledge base:
{context}

Generate content for a 10-12 slide pitch deck with the following sections:

1. **Cover Slide**: Company name, tagline, and positioning statement
2. **Problem**: What problem are we solving? (include statistics if possible)
3. **Solution**: Our unique solution and how it works
4. **Market Opportunity**: TAM, SAM, SOM analysis
5. **Product/Service**: Key features and benefits
6. **Business Model**: How we make money
7. **Traction**: Milestones achieved or planned
8. **Competition**: Competitive landscape and our advantage
9. **Go-to-Market Strategy**: How we'll acquire customers
10. **Team**: Key team members and advisors (template)
11. **Financial Projections**: 3-year revenue projection
12. **Ask**: Funding amount and use of funds

For each slide, provide:
- Headline
- Key points (3-5 bullet points)
- Supporting data or statistics
- Visual suggestions

Format as a JSON object with slides array."""


def enhancement_prompt(request: EnhancementRequest, context: str) -> str:
    idea_json = json.dumps(request.idea.model_dump(), indent=2)
    return f"""Analyze and enhance the following business idea:

{idea_json}

Focus Area: {request.focus_area or DEFAULT_FOCUS_AREA}

Context:
{context}

Provide:
1. Strengths of the current idea
2. Potential weaknesses or gaps
3. 5 specific improvement suggestions
4. Market opportunity analysis
5. Recommended next steps

Format as a structured JSON object."""
