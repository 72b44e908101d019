"""
AI Service for project drafting, project chat and productivity analysis.

Wraps Gemini calls made through `generate_text`. Every operation degrades to
a fallback answer when the model is unavailable or its output is unusable;
callers never see an LLM exception.
"""

from __future__ import annotations

import asyncio
import json
from datetime import date
from typing import Any, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from planflow.core.logger import setup_logger
from planflow.interfaces.llm_provider import ILLMProvider
from planflow.models.chat import ConsultResponse, SuggestedSubtask
from planflow.models.enums import ChatRole
from planflow.models.focus import AgentAnalysisResponse, FocusSession
from planflow.models.project import ChatAttachment, ChatMessage, Project
from planflow.services.llm_utils import (
    extract_json_block,
    generate_text,
    parse_json,
    strip_json_blocks,
)

logger = setup_logger(__name__)

CHAT_HISTORY_LIMIT = 10

CONSULT_FALLBACK = "I didn't catch that."
DRAFT_READY_TEXT = "I've drafted a plan based on your request. Check the preview on the right!"
CHAT_FALLBACK = "I couldn't process that."
ANALYSIS_FALLBACK = "I couldn't analyze the data properly."
ANALYSIS_PARSE_ERROR = "Error parsing analysis. Please try again."
TIP_FALLBACK = "Stay focused. You've got this."

CONSULT_INSTRUCTION = """
You are an expert Project Planning Agent. Your goal is to help the user define a structured project plan.
Current Date: {today}

PROCESS:
1. Analyze the user's input and any attached files.
2. CONVERSATION: If the user's request is vague, ask clarifying questions to narrow down the scope.
3. DRAFTING: When you have enough info to create a plan, or if the user provides a clear topic,
   generate a DRAFT plan in JSON format wrapped in a markdown code block.

JSON SCHEMA (Hierarchical Structure):
```json
{{
  "title": "Project Title",
  "description": "Executive summary including timeline.",
  "suggestedResources": ["Resource 1", "Resource 2"],
  "subtasks": [
    {{
      "title": "Phase 1: Preparation",
      "estimatedMinutes": 0,
      "subtasks": [
        {{ "title": "Research competitors", "estimatedMinutes": 45 }},
        {{ "title": "Draft outline", "estimatedMinutes": 30 }}
      ]
    }}
  ]
}}
```

CRITICAL RULES:
- ALWAYS wrap the JSON in ```json ... ``` code blocks.
- Hierarchy: break projects into Phases (top level), then Tasks (2nd level).
- Granularity: leaf tasks should be 15-60 minutes.
"""

PROJECT_CHAT_INSTRUCTION = """
You are a project assistant for the project: "{title}".
Description: {description}.
Current Tasks: {tasks}.

Help the user by answering questions, suggesting new tasks, or analyzing uploaded files related to this project.
Keep answers concise and actionable.
"""

ANALYST_INSTRUCTION = "You are an expert Productivity Analyst. You extract insights and visualize them."

ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "text": {"type": "STRING", "description": "Concise textual analysis of the data."},
        "chartData": {
            "type": "ARRAY",
            "description": "Data points for a chart, when the answer implies a trend or comparison.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "value": {"type": "NUMBER"},
                },
                "required": ["name", "value"],
            },
        },
        "chartType": {"type": "STRING", "enum": ["bar", "line", "pie"]},
        "chartTitle": {"type": "STRING"},
    },
    "required": ["text"],
}

SUBTASKS_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "title": {"type": "STRING"},
            "estimatedMinutes": {"type": "NUMBER"},
        },
        "required": ["title", "estimatedMinutes"],
    },
}


def _transcript(messages: Sequence[ChatMessage]) -> list[str]:
    lines = []
    for message in messages:
        label = "User" if message.role == ChatRole.USER else "Model"
        lines.append(f"[{label}]: {message.text}")
    return lines


def _simplify_sessions(history: Sequence[FocusSession]) -> list[dict[str, Any]]:
    return [
        {
            "date": session.start_time.date().isoformat(),
            "time": session.start_time.strftime("%H:%M"),
            "duration": session.actual_duration_minutes,
            "completed": session.completed,
            "reason": session.interruption_reason or "None",
        }
        for session in history
    ]


class AIService:
    """
    Gemini-backed assistant operations.

    Calls run in a worker thread so the event loop is not blocked by the
    synchronous client.
    """

    def __init__(self, llm_provider: ILLMProvider):
        self._llm_provider = llm_provider

    async def _generate(self, prompt: str | Sequence[str], **kwargs: Any) -> Optional[str]:
        return await asyncio.to_thread(generate_text, self._llm_provider, prompt, **kwargs)

    async def consult_project_agent(
        self,
        history: Sequence[ChatMessage],
        text: str,
        attachments: Sequence[ChatAttachment] = (),
        today: Optional[date] = None,
    ) -> ConsultResponse:
        """
        One turn of the project drafting conversation.

        The agent either asks clarifying questions or answers with a JSON
        draft. The draft is returned separately and stripped from the text.
        """
        instruction = CONSULT_INSTRUCTION.format(today=(today or date.today()).isoformat())
        parts = [instruction, *_transcript(history), f"[User]: {text}\n[Model]:"]
        full_text = await self._generate(parts, temperature=0.7, attachments=attachments)
        if not full_text:
            return ConsultResponse(text=CONSULT_FALLBACK)

        draft = extract_json_block(full_text)
        if not isinstance(draft, dict):
            draft = None
        clean = strip_json_blocks(full_text)
        if not clean:
            clean = DRAFT_READY_TEXT if draft is not None else full_text
        return ConsultResponse(text=clean, project_draft=draft)

    async def chat_with_project_agent(
        self,
        project: Project,
        text: str,
        attachments: Sequence[ChatAttachment] = (),
    ) -> str:
        """Answer a question about an existing project."""
        tasks = json.dumps(
            [task.model_dump(mode="json") for task in project.subtasks], ensure_ascii=False
        )
        instruction = PROJECT_CHAT_INSTRUCTION.format(
            title=project.title, description=project.description, tasks=tasks
        )
        recent = project.chat_history[-CHAT_HISTORY_LIMIT:]
        parts = [instruction, *_transcript(recent), f"[User]: {text}\n[Model]:"]
        reply = await self._generate(parts, temperature=0.7, attachments=attachments)
        return reply or CHAT_FALLBACK

    async def analyze_productivity_data(
        self, history: Sequence[FocusSession], question: str
    ) -> AgentAnalysisResponse:
        """Answer a question about focus history, optionally with chart data."""
        prompt = (
            f"User Data: {json.dumps(_simplify_sessions(history))}\n"
            f'User Question: "{question}"\n\n'
            "Analyze the data to answer the question.\n"
            "If the answer can be visualized (e.g., trends, comparisons, breakdowns), "
            "provide 'chartData' and a 'chartType'.\n"
            "Keep 'text' concise and encouraging."
        )
        raw = await self._generate(
            prompt,
            system_instruction=ANALYST_INSTRUCTION,
            response_mime_type="application/json",
            response_schema=ANALYSIS_SCHEMA,
        )
        if raw is None:
            return AgentAnalysisResponse(text=ANALYSIS_FALLBACK)

        data = parse_json(raw, None)
        if not isinstance(data, dict):
            return AgentAnalysisResponse(text=ANALYSIS_PARSE_ERROR)
        try:
            return AgentAnalysisResponse(
                text=data.get("text") or ANALYSIS_FALLBACK,
                chart_data=data.get("chartData"),
                chart_type=data.get("chartType"),
                chart_title=data.get("chartTitle"),
            )
        except PydanticValidationError as exc:
            logger.warning(f"Analyst response did not match schema: {exc}")
            return AgentAnalysisResponse(text=ANALYSIS_PARSE_ERROR)

    async def get_contextual_assistance(self, task_title: str) -> str:
        """One-sentence motivational tip for the task being focused on."""
        prompt = (
            f'The user is currently focusing on this task: "{task_title}".\n'
            "Provide a very brief (1 sentence) motivational tip or strategic advice."
        )
        tip = await self._generate(prompt, temperature=0.8, max_output_tokens=200)
        return tip or TIP_FALLBACK

    async def suggest_subtasks(self, task_title: str) -> list[SuggestedSubtask]:
        """
        Propose 3-5 actionable subtasks for a task.

        Returns an empty list when the model is unavailable or the answer
        cannot be parsed.
        """
        prompt = (
            "Break down the following task into 3-5 smaller, actionable subtasks.\n"
            f'Task: "{task_title}"\n\n'
            "Return ONLY a JSON array of objects with 'title' and 'estimatedMinutes' (number).\n"
            'Example: [{"title": "Draft intro", "estimatedMinutes": 15}, ...]'
        )
        raw = await self._generate(
            prompt,
            response_mime_type="application/json",
            response_schema=SUBTASKS_SCHEMA,
        )
        items = parse_json(raw, [])
        if not isinstance(items, list):
            return []

        suggestions = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                suggestions.append(
                    SuggestedSubtask(
                        title=str(item.get("title") or "").strip(),
                        estimated_minutes=int(item.get("estimatedMinutes") or 0),
                    )
                )
            except (PydanticValidationError, TypeError, ValueError):
                logger.debug(f"Skipping invalid subtask suggestion: {item!r}")
        return suggestions
