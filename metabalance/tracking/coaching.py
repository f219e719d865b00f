"""Coaching content: prompt builders and LLM-backed generators.

Prompt builders are pure. The generators call the LLM client and decide
what happens when it fails: the daily insight falls back to a fixed tip,
the reflection feedback degrades to None, chat lets LLMError propagate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from metabalance.tracking import llm
from metabalance.tracking.llm import LLMError, message
from metabalance.tracking.tables import ChatMessage, MetabolicProfile

logger = logging.getLogger(__name__)

CHAT_CONTEXT_MESSAGES = 10

INSIGHT_TITLE = "Today's Insight"
INSIGHT_SYSTEM = (
    "You are a knowledgeable, supportive metabolic health coach. "
    "Keep responses brief, actionable, and encouraging."
)
FALLBACK_INSIGHT = (
    "Focus on reducing seed oils today and prioritize whole, unprocessed foods. "
    "Your body will thank you!"
)

CHAT_SYSTEM = (
    "You are a knowledgeable and empathetic health coach specializing in obesity reversal and metabolic health. \n"
    "You provide evidence-based advice on diet, intermittent fasting, supplements, and lifestyle changes "
    "based on the latest research.\n"
    "Be supportive, motivational, and practical in your responses."
)


@dataclass(frozen=True, slots=True)
class InsightContext:
    profile: MetabolicProfile | None
    weight_change_7d: float
    progress_logs_7d: int
    meal_days_7d: int
    avg_win_score_7d: float


@dataclass(frozen=True, slots=True)
class GeneratedInsight:
    insight_type: str
    title: str
    content: str


def _momentum(avg: float) -> str:
    if avg >= 4:
        return " - Excellent momentum!"
    if avg >= 3:
        return " - Good consistency!"
    if avg >= 2:
        return " - Building habits!"
    if avg > 0:
        return " - Keep going!"
    return ""


def insight_prompt(ctx: InsightContext) -> str:
    p = ctx.profile
    current = p.current_weight if p and p.current_weight else None
    target = p.target_weight if p and p.target_weight else None
    to_lose = current - target if current and target else "N/A"
    conditions = []
    if p is not None:
        if p.has_obesity:
            conditions.append("Obesity")
        if p.has_diabetes:
            conditions.append("Diabetes")
        if p.has_metabolic_syndrome:
            conditions.append("Metabolic Syndrome")
    sign = "+" if ctx.weight_change_7d > 0 else ""

    context = "\n".join(
        [
            "User Profile:",
            f"- Current Weight: {current or 'Not set'} lbs",
            f"- Target Weight: {target or 'Not set'} lbs",
            f"- Weight to lose: {to_lose} lbs",
            f"- Recent weight change (7 days): {sign}{ctx.weight_change_7d:.1f} lbs",
            f"- Stress Level: {(p and p.stress_level) or 'unknown'}",
            f"- Sleep Quality: {(p and p.sleep_quality) or 'unknown'}",
            f"- Activity Level: {(p and p.activity_level) or 'unknown'}",
            f"- Taking GLP-1: {'Yes' if p and p.taking_glp1 else 'No'}",
            f"- Health conditions: {', '.join(conditions) or 'None reported'}",
            "",
            "Recent Activity:",
            f"- Progress logs in past week: {ctx.progress_logs_7d}",
            f"- Meals logged recently: {ctx.meal_days_7d}",
            f"- Average win score (7 days): {ctx.avg_win_score_7d:.1f}/5.0 stars{_momentum(ctx.avg_win_score_7d)}",
        ]
    )
    return (
        "You are a supportive metabolic health coach helping someone on their weight loss and metabolic "
        "health journey. Based on their profile and recent activity, generate a brief, personalized daily "
        "insight (2-3 sentences max) that:\n\n"
        "1. Acknowledges their current situation or recent progress\n"
        "2. Provides one specific, actionable tip related to metabolic health, nutrition, or lifestyle\n"
        "3. Offers encouragement and motivation\n\n"
        "Focus on evidence-based advice about:\n"
        "- Reducing linoleic acid / seed oils\n"
        "- Intermittent fasting benefits\n"
        "- Gut health and probiotics\n"
        "- NAD+ and mitochondrial function\n"
        "- Managing stress and sleep\n"
        "- Staying consistent with tracking\n\n"
        f"{context}\n\n"
        "Generate a warm, encouraging daily insight:"
    )


async def generate_daily_insight(ctx: InsightContext) -> GeneratedInsight:
    try:
        content = await llm.chat_completion([message("system", INSIGHT_SYSTEM), message("user", insight_prompt(ctx))])
    except LLMError as exc:
        logger.warning("Daily insight generation failed, using fallback: %s", exc)
        return GeneratedInsight(insight_type="tip", title=INSIGHT_TITLE, content=FALLBACK_INSIGHT)
    return GeneratedInsight(insight_type="motivation", title=INSIGHT_TITLE, content=content)


def chat_system_prompt(profile: MetabolicProfile | None) -> str:
    prompt = CHAT_SYSTEM
    if profile is None:
        return prompt
    prompt += "\n\nUser context:"
    if profile.current_weight and profile.target_weight:
        prompt += f"\n- Current weight: {profile.current_weight} lbs, Target: {profile.target_weight} lbs"
    if profile.primary_goal:
        prompt += f"\n- Primary goal: {profile.primary_goal}"
    if profile.has_obesity:
        prompt += "\n- Has obesity"
    if profile.has_diabetes:
        prompt += "\n- Has diabetes"
    if profile.taking_glp1:
        prompt += "\n- Taking GLP-1 medication"
    return prompt


def chat_messages(
    profile: MetabolicProfile | None,
    history: list[ChatMessage],
    new_message: str,
) -> list[dict[str, str]]:
    """System prompt, the prior history (already excluding ``new_message``), then the new message."""
    messages = [message("system", chat_system_prompt(profile))]
    messages.extend(message(m.role, m.content) for m in history[-CHAT_CONTEXT_MESSAGES:])
    messages.append(message("user", new_message))
    return messages


async def coach_reply(
    profile: MetabolicProfile | None,
    history: list[ChatMessage],
    new_message: str,
) -> str:
    return await llm.chat_completion(chat_messages(profile, history, new_message))


def reflection_messages(
    profile: MetabolicProfile | None,
    went_well: str | None,
    challenges: str | None,
    next_week_plan: str | None,
    days_logged: int,
    avg_win_score: int,
) -> list[dict[str, str]]:
    current = profile.current_weight if profile else None
    target = profile.target_weight if profile else None
    activity = profile.activity_level if profile else None
    system = (
        "You are a metabolic health coach analyzing a user's weekly reflection. Provide 2-3 specific, "
        "actionable insights based on their answers and weekly stats. "
        f"User profile: {current} lbs current, {target} lbs target, {activity} activity level."
    )
    user = (
        "Weekly Reflection:\n\n"
        f"What went well: {went_well or ''}\n\n"
        f"Challenges: {challenges or ''}\n\n"
        f"Next week plan: {next_week_plan or ''}\n\n"
        f"Stats: Logged {days_logged}/7 days, Average daily win score: {avg_win_score}/5 stars"
    )
    return [message("system", system), message("user", user)]


async def reflection_feedback(
    profile: MetabolicProfile | None,
    went_well: str | None,
    challenges: str | None,
    next_week_plan: str | None,
    days_logged: int,
    avg_win_score: int,
) -> str | None:
    """AI feedback for a weekly reflection, or None when the model is unavailable."""
    msgs = reflection_messages(profile, went_well, challenges, next_week_plan, days_logged, avg_win_score)
    try:
        return await llm.chat_completion(msgs)
    except LLMError as exc:
        logger.warning("Reflection feedback unavailable: %s", exc)
        return None
