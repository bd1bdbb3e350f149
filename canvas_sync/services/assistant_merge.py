"""
Assistant Merge
===============

Context-aware alternate merge strategy. An external assistant receives the
original file and a rendered snapshot of the edited markup and answers with
the complete updated file. Dynamic expressions, loops and conditionals of
the original are kept; only the visual changes are applied.

Two backends are provided:

- ``CliAssistantMerge`` spawns a command-line assistant and sends the
  prompt on stdin.
- ``LLMAssistantMerge`` calls Gemini through ``LLMService``.

Both enforce a timeout and raise ``AlternateMergeFailure`` instead of
returning partial output.
"""

import asyncio
import json
import logging
import re
import shlex
import shutil
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from ..codegen.errors import AlternateMergeFailure, ParseFailure
from ..codegen.imports import ImportHint
from ..codegen.tsx import parse_tsx, raise_on_syntax_error
from ..config import Settings
from .llm_service import LLMService

logger = logging.getLogger(__name__)

_FENCED_CODE = re.compile(r"```(?:tsx?|jsx?)?[ \t]*\r?\n([\s\S]*?)```")


class AssistantMergeRequest(BaseModel):
    """Everything the assistant needs to update one file."""
    file_path: str
    original_source: str
    snapshot_markup: str
    import_hints: List[ImportHint] = Field(default_factory=list)
    mock_bindings: Optional[Dict[str, Any]] = None


class AlternateMergeStrategy(Protocol):
    """Pluggable merge backend: request in, complete updated source out."""

    async def merge(self, request: AssistantMergeRequest) -> str:
        ...


MERGE_RULES = """RULES:
1. Keep every dynamic construct of the original: interpolated expressions, loops (.map), conditionals and variable references. Never replace them with the literal values visible in the snapshot.
2. Work out what changed visually (styles, text, added or removed elements, layout structure) by comparing what the original renders with the snapshot.
3. Apply those changes to the original source so that rendering it produces the edited snapshot.
4. Follow the styling convention the original file already uses. The snapshot carries inline styles because that is how the visual editor records them:
   - if the original uses utility classes (className="text-green-600 p-4"), translate the changed inline styles into equivalent classes and drop the inline style attribute
   - if the original uses inline styles, keep inline styles
   - if the original uses CSS modules, keep CSS modules
   Do not mix inline styles and utility classes unless the original already does.
5. Leave everything else untouched: imports, state, hooks, helper functions, event handlers and formatting.
6. Answer with the complete updated file only. No markdown fences, no explanations."""


def build_merge_prompt(request: AssistantMergeRequest) -> str:
    """Prompt text sent to the assistant for one merge."""
    sections = [
        f"File: {request.file_path}",
        "A user edited this component in a visual canvas editor. The markup below "
        "is a rendered snapshot of the edited component, not source code to paste.",
        f"ORIGINAL FILE:\n```tsx\n{request.original_source}\n```",
        f"EDITED SNAPSHOT:\n```jsx\n{request.snapshot_markup}\n```",
    ]

    if request.mock_bindings:
        bindings = "\n".join(
            f"  {name} = {json.dumps(value, default=str)}" for name, value in request.mock_bindings.items()
        )
        sections.append(
            "SNAPSHOT VALUES:\n"
            "The snapshot was rendered with these values substituted for dynamic expressions:\n"
            f"{bindings}\n"
            "Treat the snapshot as a visual reference of what changed, evaluated with these values."
        )

    if request.import_hints:
        hints = "\n".join(f"- {hint.component} from '{hint.import_path}'" for hint in request.import_hints)
        sections.append(f"COMPONENT IMPORTS:\nThe edited markup uses these components; add any missing imports:\n{hints}")

    sections.append(MERGE_RULES)
    return "\n\n".join(sections)


def clean_assistant_response(response: str) -> str:
    """
    Source text from an assistant answer.

    Code inside the first markdown fence is used when present. The result
    must be non-empty and parse as TSX.

    Raises:
        AlternateMergeFailure: nothing usable in the response.
    """
    match = _FENCED_CODE.search(response)
    cleaned = (match.group(1) if match else response).strip()
    if not cleaned:
        raise AlternateMergeFailure("Assistant returned an empty response", reason="empty_response")

    tree, data = parse_tsx(cleaned)
    try:
        raise_on_syntax_error(tree, data, "assistant output")
    except ParseFailure as e:
        raise AlternateMergeFailure(str(e), reason="invalid_source") from e
    return cleaned + "\n"


def is_command_available(command: str) -> bool:
    """Whether the executable of ``command`` is on ``PATH``."""
    parts = shlex.split(command)
    return bool(parts) and shutil.which(parts[0]) is not None


class CliAssistantMerge:
    """Alternate merge through a command-line assistant (prompt on stdin, file on stdout)."""

    def __init__(self, command: str = "claude", timeout: float = 120.0):
        self.command = command
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return is_command_available(self.command)

    async def merge(self, request: AssistantMergeRequest) -> str:
        prompt = build_merge_prompt(request)
        logger.info(f"[ASSISTANT-MERGE] Running '{self.command}' for {request.file_path}")

        try:
            process = await asyncio.create_subprocess_exec(
                *shlex.split(self.command),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise AlternateMergeFailure(f"Failed to start '{self.command}': {e}", reason="unavailable") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(prompt.encode("utf-8")), self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.error(f"[ASSISTANT-MERGE] '{self.command}' timed out after {self.timeout}s")
            raise AlternateMergeFailure(f"Assistant timed out after {self.timeout}s", reason="timeout")

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            logger.error(f"[ASSISTANT-MERGE] '{self.command}' exited with code {process.returncode}: {detail}")
            raise AlternateMergeFailure(
                f"Assistant exited with code {process.returncode}: {detail}",
                reason="process",
            )

        result = clean_assistant_response(stdout.decode("utf-8", errors="replace"))
        logger.info(f"[ASSISTANT-MERGE] Merge complete for {request.file_path}, length={len(result)}")
        return result


class LLMAssistantMerge:
    """Alternate merge through Gemini on Vertex AI."""

    SYSTEM_INSTRUCTION = (
        "You update React component source files to reflect edits made in a visual editor. "
        "You answer with complete, valid TSX source only."
    )

    def __init__(self, llm_service: Optional[LLMService] = None, timeout: float = 120.0):
        self.llm_service = llm_service or LLMService()
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return self.llm_service.available

    async def merge(self, request: AssistantMergeRequest) -> str:
        prompt = build_merge_prompt(request)
        logger.info(f"[ASSISTANT-MERGE] Requesting Gemini merge for {request.file_path}")

        try:
            response = await asyncio.wait_for(
                self.llm_service.generate_text(prompt, system_instruction=self.SYSTEM_INSTRUCTION),
                self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"[ASSISTANT-MERGE] Gemini merge timed out after {self.timeout}s")
            raise AlternateMergeFailure(f"Assistant timed out after {self.timeout}s", reason="timeout")

        if not response.success:
            raise AlternateMergeFailure(f"Assistant request failed: {response.error}", reason="network")

        return clean_assistant_response(response.content)


def select_alternate_strategy(settings: Settings) -> Optional[AlternateMergeStrategy]:
    """
    Alternate strategy for the configured merge mode, or ``None`` for the deterministic merge.

    In ``auto`` mode the assistant is only used when its backend is available.
    """
    if settings.merge_strategy == "deterministic":
        return None

    if settings.assistant_backend == "vertex":
        strategy = LLMAssistantMerge(timeout=settings.assistant_timeout)
    else:
        strategy = CliAssistantMerge(command=settings.assistant_command, timeout=settings.assistant_timeout)

    if settings.merge_strategy == "auto" and not strategy.available:
        logger.info(f"[ASSISTANT-MERGE] {settings.assistant_backend} backend unavailable, using deterministic merge")
        return None
    logger.info(f"[ASSISTANT-MERGE] Using {settings.assistant_backend} backend for existing files")
    return strategy
