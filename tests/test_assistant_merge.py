"""
Assistant Merge Tests
=====================

The CLI backend is exercised against small Python scripts standing in for
the assistant command; the Gemini backend against a fake LLM service.
"""

import asyncio
import shlex
import sys

import pytest

from canvas_sync.codegen.errors import AlternateMergeFailure
from canvas_sync.codegen.imports import ImportHint
from canvas_sync.config import Settings
from canvas_sync.services.assistant_merge import (
    AssistantMergeRequest,
    CliAssistantMerge,
    LLMAssistantMerge,
    build_merge_prompt,
    clean_assistant_response,
    select_alternate_strategy,
)
from canvas_sync.services.llm_service import LLMResponse

MERGED_SOURCE = "export default function Page() {\n  return <main />\n}\n"


def make_request(**overrides) -> AssistantMergeRequest:
    values = {
        "file_path": "app/page.tsx",
        "original_source": "export default function Page() {\n  return <div className=\"p-4\" />\n}\n",
        "snapshot_markup": '<main style={{ padding: "16px" }} />',
    }
    values.update(overrides)
    return AssistantMergeRequest(**values)


def script_command(tmp_path, body: str) -> str:
    script = tmp_path / "assistant.py"
    script.write_text(body)
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"


class FakeLLMService:
    def __init__(self, response: LLMResponse = None, delay: float = 0):
        self.response = response
        self.delay = delay
        self.prompts = []

    @property
    def available(self) -> bool:
        return True

    async def generate_text(self, prompt, system_instruction=None, temperature=None):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.response


# ---------------------------------------------------------------------------
# Prompt and response handling
# ---------------------------------------------------------------------------

def test_prompt_contains_sources_and_hints():
    request = make_request(
        import_hints=[ImportHint(component="Button", import_path="@/components/ui/index")],
        mock_bindings={"title": "Title", "items": []},
    )
    prompt = build_merge_prompt(request)
    assert "File: app/page.tsx" in prompt
    assert request.original_source in prompt
    assert request.snapshot_markup in prompt
    assert "- Button from '@/components/ui/index'" in prompt
    assert '  title = "Title"' in prompt
    assert "  items = []" in prompt
    assert "RULES:" in prompt


def test_prompt_without_optional_sections():
    prompt = build_merge_prompt(make_request())
    assert "SNAPSHOT VALUES" not in prompt
    assert "COMPONENT IMPORTS" not in prompt


def test_clean_response_uses_first_fence():
    response = f"Here is the file:\n\n```tsx\n{MERGED_SOURCE}```\n\nDone.\n```js\nconst other = 1\n```"
    assert clean_assistant_response(response) == MERGED_SOURCE


def test_clean_response_without_fence():
    assert clean_assistant_response(f"\n\n{MERGED_SOURCE}\n") == MERGED_SOURCE


@pytest.mark.parametrize("response, reason", [
    ("", "empty_response"),
    ("```tsx\n   \n```", "empty_response"),
    ("Sorry, I cannot do that <", "invalid_source"),
])
def test_clean_response_failures(response, reason):
    with pytest.raises(AlternateMergeFailure) as excinfo:
        clean_assistant_response(response)
    assert excinfo.value.reason == reason


# ---------------------------------------------------------------------------
# CLI backend
# ---------------------------------------------------------------------------

def test_cli_merge_success(tmp_path):
    command = script_command(tmp_path, (
        "import sys\n"
        "prompt = sys.stdin.read()\n"
        "assert 'ORIGINAL FILE' in prompt\n"
        f"print('```tsx\\n' + {MERGED_SOURCE!r} + '```')\n"
    ))
    strategy = CliAssistantMerge(command=command, timeout=30)
    assert strategy.available
    assert asyncio.run(strategy.merge(make_request())) == MERGED_SOURCE


def test_cli_merge_timeout(tmp_path):
    command = script_command(tmp_path, "import sys, time\nsys.stdin.read()\ntime.sleep(30)\n")
    strategy = CliAssistantMerge(command=command, timeout=0.5)
    with pytest.raises(AlternateMergeFailure) as excinfo:
        asyncio.run(strategy.merge(make_request()))
    assert excinfo.value.reason == "timeout"


def test_cli_merge_nonzero_exit(tmp_path):
    command = script_command(tmp_path, "import sys\nsys.stdin.read()\nsys.stderr.write('boom')\nsys.exit(3)\n")
    strategy = CliAssistantMerge(command=command, timeout=30)
    with pytest.raises(AlternateMergeFailure) as excinfo:
        asyncio.run(strategy.merge(make_request()))
    assert excinfo.value.reason == "process"
    assert "boom" in str(excinfo.value)


def test_cli_merge_missing_command():
    strategy = CliAssistantMerge(command="canvas-sync-no-such-assistant --print", timeout=5)
    assert not strategy.available
    with pytest.raises(AlternateMergeFailure) as excinfo:
        asyncio.run(strategy.merge(make_request()))
    assert excinfo.value.reason == "unavailable"


# ---------------------------------------------------------------------------
# Gemini backend
# ---------------------------------------------------------------------------

def test_llm_merge_success():
    service = FakeLLMService(LLMResponse(success=True, content=f"```tsx\n{MERGED_SOURCE}```"))
    strategy = LLMAssistantMerge(llm_service=service, timeout=5)
    assert asyncio.run(strategy.merge(make_request())) == MERGED_SOURCE
    assert "EDITED SNAPSHOT" in service.prompts[0]


def test_llm_merge_timeout():
    service = FakeLLMService(LLMResponse(success=True, content=MERGED_SOURCE), delay=2)
    strategy = LLMAssistantMerge(llm_service=service, timeout=0.05)
    with pytest.raises(AlternateMergeFailure) as excinfo:
        asyncio.run(strategy.merge(make_request()))
    assert excinfo.value.reason == "timeout"


def test_llm_merge_request_failure():
    service = FakeLLMService(LLMResponse(success=False, error="quota exceeded"))
    strategy = LLMAssistantMerge(llm_service=service, timeout=5)
    with pytest.raises(AlternateMergeFailure) as excinfo:
        asyncio.run(strategy.merge(make_request()))
    assert excinfo.value.reason == "network"


# ---------------------------------------------------------------------------
# Strategy selection
# ---------------------------------------------------------------------------

def test_select_alternate_strategy():
    assert select_alternate_strategy(Settings(merge_strategy="deterministic")) is None

    missing = "canvas-sync-no-such-assistant"
    assert select_alternate_strategy(Settings(merge_strategy="auto", assistant_command=missing)) is None

    forced = select_alternate_strategy(Settings(merge_strategy="assistant", assistant_command=missing))
    assert isinstance(forced, CliAssistantMerge)
    assert forced.command == missing

    found = select_alternate_strategy(Settings(merge_strategy="auto", assistant_command=shlex.quote(sys.executable)))
    assert isinstance(found, CliAssistantMerge)

    vertex = select_alternate_strategy(Settings(merge_strategy="assistant", assistant_backend="vertex"))
    assert isinstance(vertex, LLMAssistantMerge)
