from __future__ import annotations

from datetime import date, datetime
from typing import Optional

PRIORITY_PROMPT = """Analyze the following task and determine its priority level based on urgency, importance, and workload:

Task Details:
- Title: "{title}"
- Description: "{description}"
- Subject: "{subject}"
- Due Date: {due_date}
- Current Date: {today}
{user_context}
Priority Levels:
- critical: Major assignments, exams, projects with tight deadlines (within 1-2 days) or high academic weight
- high: Important assignments, tests, projects due within a week or with significant impact on grades
- medium: Regular assignments, homework with moderate deadlines (1-2 weeks)
- low: Minor tasks, practice exercises, low-stakes assignments with flexible deadlines
- none: Optional tasks, extra credit, or very low-priority items

Analyze the title and description content for these priority indicators:

HIGH PRIORITY KEYWORDS in title/description:
- "exam", "test", "quiz", "midterm", "final", "presentation"
- "project", "essay", "paper", "report", "thesis"
- "urgent", "ASAP", "important", "critical", "deadline"
- Numbers indicating length/scope: "5-page", "10 questions", "research"

MEDIUM PRIORITY KEYWORDS:
- "homework", "assignment", "worksheet", "practice"
- "review", "study", "prepare", "read"

LOW PRIORITY KEYWORDS:
- "optional", "extra credit", "bonus", "draft", "outline"
- "discussion post", "journal entry", "reflection"

WORKLOAD ESTIMATION from title/description:
- Long assignments: essays, research papers, projects (higher priority)
- Quick tasks: worksheets, discussion posts, reading (lower priority)
- Group work or presentations (often higher priority due to coordination)

Consider:
1. Time urgency (how close is the due date?)
2. Academic importance based on keywords in title/description
3. Workload estimation from title/description content
4. Subject context and typical assignment weights
5. Specific urgency language in title/description

Respond with ONLY one word: critical, high, medium, low, or none"""

OPTIMIZE_TITLE_PROMPT = """Optimize this task title to be more concise and effective while maintaining its meaning:

Title: "{title}"
Subject: "{subject}"

Return only the optimized title, nothing else."""

OPTIMIZE_DESCRIPTION_PROMPT = """Optimize this task description to be more concise and effective while maintaining all important information:

Description: "{description}"
Title: "{title}"
Subject: "{subject}"

Return only the optimized description, nothing else."""

GENERATE_DESCRIPTION_PROMPT = """Generate a helpful and concise description for this task based on the available details:

Task Details:
- Title: "{title}"
- Subject: "{subject}"
- Due Date: {due_date}

Create a description that:
1. Explains what needs to be done based on the title
2. Includes relevant context from the subject area
3. Mentions any time-sensitive aspects if there's a due date
4. Provides helpful details someone would need to complete this task
5. Keeps it concise but informative (2-3 sentences)

Return only the description, nothing else."""


def _format_day(value: Optional[date | datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%Y-%m-%d")


def priority_prompt(
    title: str,
    description: Optional[str],
    subject: Optional[str],
    due_date: Optional[datetime],
    today: date,
    user_context: Optional[str] = None,
) -> str:
    context_line = f"- Additional Context: {user_context.strip()}\n" if user_context and user_context.strip() else ""
    return PRIORITY_PROMPT.format(
        title=title,
        description=description or "No description provided",
        subject=subject or "No subject specified",
        due_date=_format_day(due_date) or "No due date",
        today=_format_day(today),
        user_context=context_line,
    )


def optimize_title_prompt(title: str, subject: Optional[str]) -> str:
    return OPTIMIZE_TITLE_PROMPT.format(title=title, subject=subject or "General")


def optimize_description_prompt(description: Optional[str], title: str, subject: Optional[str]) -> str:
    return OPTIMIZE_DESCRIPTION_PROMPT.format(
        description=description or "No description provided",
        title=title,
        subject=subject or "General",
    )


def generate_description_prompt(title: str, subject: Optional[str], due_date: Optional[datetime]) -> str:
    return GENERATE_DESCRIPTION_PROMPT.format(
        title=title,
        subject=subject or "No subject specified",
        due_date=_format_day(due_date) or "No due date",
    )
