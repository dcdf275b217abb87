# map_pins/io/prompt.py
from collections import deque
from collections.abc import Iterable

from map_pins.app.protocols import UserPrompt


class ScriptedPrompt(UserPrompt):
    """Answers confirmations from a queue, then falls back to `default`."""

    def __init__(self, answers: Iterable[bool] = (), default: bool = True):
        self.answers = deque(answers)
        self.default = default
        self.asked: list[str] = []
        self.notices: list[str] = []

    def confirm(self, message: str) -> bool:
        self.asked.append(message)
        return self.answers.popleft() if self.answers else self.default

    def notify(self, message: str) -> None:
        self.notices.append(message)


class ConsolePrompt(UserPrompt):
    def __init__(self, input_fn=input, output_fn=print):
        self.input_fn = input_fn
        self.output_fn = output_fn

    def confirm(self, message: str) -> bool:
        answer = self.input_fn(f"{message} [y/N] ")
        return answer.strip().lower() in {"y", "yes"}

    def notify(self, message: str) -> None:
        self.output_fn(message)
