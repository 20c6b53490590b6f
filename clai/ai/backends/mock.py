# clai/ai/backends/mock.py
"""
Offline backend returning predictable echo commands.

Selected with MOCK_AI=1; used by tests and demos.
"""
import json
import re

from clai.ai.types import ChatRequest, ChatResponse, Usage

_COUNT_PATTERN = re.compile(r"exactly (\d+) different")
DEFAULT_MOCK_COUNT = 3


class MockBackend:
    name = "mock"

    def is_available(self) -> bool:
        return True

    async def complete(self, request: ChatRequest) -> ChatResponse:
        system_message = request.messages[0].content if request.messages else ""

        # Multi-command prompts ask for a JSON object
        if "JSON" in system_message:
            match = _COUNT_PATTERN.search(system_message)
            count = int(match.group(1)) if match else DEFAULT_MOCK_COUNT
            commands = [f'echo "mock command {i}"' for i in range(1, count + 1)]
            return ChatResponse(
                content=json.dumps({"commands": commands}),
                model="mock",
                usage=Usage(prompt_tokens=100, completion_tokens=50, total_tokens=150),
            )

        return ChatResponse(
            content='echo "mock command"',
            model="mock",
            usage=Usage(prompt_tokens=50, completion_tokens=10, total_tokens=60),
        )
