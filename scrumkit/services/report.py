"""
Retrospective report assembly.

Shapes a session's items and action items into a prompt for the text
generation service and stores the returned markdown as the session's
single current report. Grouping and ordering of the input happen here:
categories in a fixed order, items by vote count descending, ties kept in
store order.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from scrumkit import store
from scrumkit.errors import GenerationFailed
from scrumkit.models.action_item import ActionPriority, ActionStatus
from scrumkit.models.item import ItemCategory
from scrumkit.models.report import Report

logger = logging.getLogger(__name__)

CATEGORY_ORDER = (ItemCategory.went_well, ItemCategory.to_improve, ItemCategory.action_item)


class TextGenerator(Protocol):
    async def generate(self, system_prompt: str, user_prompt: str) -> str: ...


@dataclass
class ReportConfig:
    tone: str = "informal"
    language: str = "en"
    focus_areas: List[str] = field(default_factory=list)
    custom_instructions: Optional[str] = None


@dataclass
class ReportItem:
    category: ItemCategory
    content: str
    vote_count: int = 0
    discussion_notes: Optional[str] = None
    author_name: Optional[str] = None


@dataclass
class ReportActionItem:
    description: str
    priority: str = "medium"
    status: str = "open"
    assignee_name: Optional[str] = None
    due_date: Optional[datetime] = None


@dataclass
class RetrospectiveData:
    session_name: str
    sprint_name: Optional[str] = None
    items: List[ReportItem] = field(default_factory=list)
    action_items: List[ReportActionItem] = field(default_factory=list)


# ── Localised prompt text ──
LABELS = {
    "en": {
        "system": (
            "You are an expert at writing Sprint Retrospective reports.\n"
            "Write a clear, {tone} report in {language_name}.\n"
            "The report should be concise but complete and contain actionable insights."
        ),
        "formal": "professional",
        "informal": "accessible",
        "language_name": "English",
        "intro": "Generate a retrospective report for",
        "categories": {
            ItemCategory.went_well: "Went Well",
            ItemCategory.to_improve: "To Improve",
            ItemCategory.action_item: "Action Items",
        },
        "votes": "votes",
        "notes": "Notes",
        "committed": "Committed Action Items",
        "owner": "Owner",
        "unassigned": "Unassigned",
        "priority": "Priority",
        "due": "Due",
        "priorities": {"low": "Low", "medium": "Medium", "high": "High"},
        "statuses": {"open": "Open", "in_progress": "In Progress", "done": "Done"},
        "focus": "Focus areas",
        "extra": "Additional instructions",
        "sections_intro": "Write the report in markdown with exactly these sections, in this order",
        "sections": [
            ("Summary", "Brief overview of key points"),
            ("What Went Well", "Highlights and successes"),
            ("Areas for Improvement", "Top issues and suggestions"),
            ("Action Items", "Concrete steps with owners"),
            ("Recommendations", "Tips for the next sprint"),
        ],
    },
    "nl": {
        "system": (
            "Je bent een expert in het schrijven van Sprint Retrospective rapporten.\n"
            "Schrijf een duidelijk, {tone} rapport in het {language_name}.\n"
            "Het rapport moet beknopt maar volledig zijn en actionable insights bevatten."
        ),
        "formal": "professioneel",
        "informal": "toegankelijk",
        "language_name": "Nederlands",
        "intro": "Genereer een retrospective rapport voor",
        "categories": {
            ItemCategory.went_well: "Ging Goed",
            ItemCategory.to_improve: "Kan Beter",
            ItemCategory.action_item: "Actiepunten",
        },
        "votes": "stemmen",
        "notes": "Notities",
        "committed": "Concrete Actiepunten",
        "owner": "Eigenaar",
        "unassigned": "Niet toegewezen",
        "priority": "Prioriteit",
        "due": "Deadline",
        "priorities": {"low": "Laag", "medium": "Gemiddeld", "high": "Hoog"},
        "statuses": {"open": "Open", "in_progress": "In Uitvoering", "done": "Afgerond"},
        "focus": "Focus gebieden",
        "extra": "Extra instructies",
        "sections_intro": "Schrijf het rapport in markdown met precies deze secties, in deze volgorde",
        "sections": [
            ("Samenvatting", "Korte overview van de belangrijkste punten"),
            ("Wat ging goed", "Highlights en successen"),
            ("Verbeterpunten", "Top problemen en suggesties"),
            ("Actiepunten", "Concrete stappen met eigenaren"),
            ("Aanbevelingen", "Tips voor de volgende sprint"),
        ],
    },
}


def _labels_for(language: str) -> Tuple[dict, str]:
    """Labels for a language tag and the language name to ask the model for.

    Tags without their own labels fall back to English labels but still ask
    for the report in the requested language.
    """
    primary = language.lower().split("-")[0]
    if primary in LABELS:
        labels = LABELS[primary]
        return labels, labels["language_name"]
    return LABELS["en"], language


def group_items(items: List[ReportItem]) -> Dict[ItemCategory, List[ReportItem]]:
    """Group by category (fixed order) and sort each group by votes, descending.

    ``sorted`` is stable, so equal vote counts keep their input order.
    """
    grouped: Dict[ItemCategory, List[ReportItem]] = {category: [] for category in CATEGORY_ORDER}
    for item in items:
        grouped[ItemCategory(item.category)].append(item)
    return {
        category: sorted(group, key=lambda i: i.vote_count, reverse=True)
        for category, group in grouped.items()
    }


def build_prompts(data: RetrospectiveData, config: ReportConfig) -> Tuple[str, str]:
    """Return ``(system_prompt, user_prompt)`` for the text generation call."""
    labels, language_name = _labels_for(config.language)
    tone = labels["formal"] if config.tone == "formal" else labels["informal"]
    system_prompt = labels["system"].format(tone=tone, language_name=language_name)

    lines = [f'{labels["intro"]}: "{data.session_name}"']
    if data.sprint_name:
        lines.append(f"Sprint: {data.sprint_name}")

    for category, group in group_items(data.items).items():
        lines.append("")
        lines.append(f'## {labels["categories"][category]} ({len(group)} items)')
        for item in group:
            lines.append(f'- {item.content} ({item.vote_count} {labels["votes"]})')
            if item.discussion_notes:
                lines.append(f'  {labels["notes"]}: {item.discussion_notes}')

    lines.append("")
    lines.append(f'## {labels["committed"]} ({len(data.action_items)})')
    for action in data.action_items:
        parts = [
            action.description,
            f'{labels["owner"]}: {action.assignee_name or labels["unassigned"]}',
            f'{labels["priority"]}: {labels["priorities"].get(action.priority, action.priority)}',
            f'Status: {labels["statuses"].get(action.status, action.status)}',
        ]
        if action.due_date:
            parts.append(f'{labels["due"]}: {action.due_date.date().isoformat()}')
        lines.append("- " + " | ".join(parts))

    if config.focus_areas:
        lines.append("")
        lines.append(f'{labels["focus"]}: {", ".join(config.focus_areas)}')
    if config.custom_instructions:
        lines.append("")
        lines.append(f'{labels["extra"]}: {config.custom_instructions}')

    lines.append("")
    lines.append(f'{labels["sections_intro"]}:')
    for number, (title, hint) in enumerate(labels["sections"], start=1):
        lines.append(f"{number}. {title} - {hint}")

    return system_prompt, "\n".join(lines)


async def collect_session_data(db: AsyncSession, session_id: str) -> RetrospectiveData:
    """Read the session, its items with vote counts and its action items."""
    session = await store.get_session(db, session_id)
    rows = await store.list_items(db, session_id)
    actions = await store.list_action_items(db, session_id)

    return RetrospectiveData(
        session_name=session.name,
        sprint_name=session.sprint_name,
        items=[
            ReportItem(
                category=item.category,
                content=item.content,
                vote_count=vote_count,
                discussion_notes=item.discussion_notes,
                author_name=None if item.is_anonymous else item.author_name,
            )
            for item, vote_count in rows
        ],
        action_items=[
            ReportActionItem(
                description=action.description,
                priority=ActionPriority(action.priority).value,
                status=ActionStatus(action.status).value,
                assignee_name=action.assignee_name,
                due_date=action.due_date,
            )
            for action in actions
        ],
    )


async def generate_session_report(
    db: AsyncSession,
    generator: TextGenerator,
    session_id: str,
    config: ReportConfig,
    generated_by: Optional[str] = None,
    timeout: float = 60.0,
) -> Report:
    """Generate the report and store it, replacing any earlier one.

    Nothing is stored when generation fails or times out.
    """
    data = await collect_session_data(db, session_id)
    system_prompt, user_prompt = build_prompts(data, config)

    try:
        content = await asyncio.wait_for(generator.generate(system_prompt, user_prompt), timeout)
    except asyncio.TimeoutError as e:
        logger.warning(f"Report generation for session {session_id} timed out after {timeout}s")
        raise GenerationFailed("Report generation timed out") from e
    except GenerationFailed:
        logger.warning(f"Report generation for session {session_id} failed")
        raise
    except Exception as e:
        logger.exception(f"Text generator crashed for session {session_id}")
        raise GenerationFailed("Failed to generate report") from e

    if not content or not content.strip():
        raise GenerationFailed("The text generation service returned an empty report")

    report = await store.upsert_report(db, session_id, content, generated_by)
    await db.commit()
    logger.info(f"Report stored for session {session_id}")
    return report
