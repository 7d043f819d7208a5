"""Fixed-question quiz that ends on its own after the last answer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence, Tuple

from ..errors import InvalidInputError
from ..shell_config import QuizQuestion
from .console import ConsoleBuffer
from .modal_input import ModeFrame, ModeSignal

if TYPE_CHECKING:
    from .session_runner import SessionRunner

QUIZ_PROMPT = "ANSWER> "


@dataclass
class QuizContext:
    questions: Tuple[QuizQuestion, ...]
    index: int = 0
    score: int = 0

    @property
    def finished(self) -> bool:
        return self.index >= len(self.questions)

    @property
    def score_text(self) -> str:
        return f"{self.score}/{len(self.questions)}"


def answer_matches(answer: str, expected: str) -> bool:
    return answer.casefold() == expected.casefold()


class Quiz:
    """Score one answer per line; every line advances to the next question."""

    def __init__(self, context: QuizContext, *, console: ConsoleBuffer) -> None:
        self.context = context
        self._console = console

    def ask_current(self) -> None:
        ctx = self.context
        self._console.echo(f"Question {ctx.index + 1}: {ctx.questions[ctx.index].prompt}")

    def handle_line(self, line: str) -> ModeSignal:
        ctx = self.context
        if answer_matches(line, ctx.questions[ctx.index].answer):
            ctx.score += 1
            self._console.echo("Correct!")
        else:
            self._console.echo("Incorrect.")
        ctx.index += 1
        if not ctx.finished:
            self.ask_current()
            return ModeSignal.CONTINUE
        self._console.echo("Quiz finished!")
        self._console.echo(f"You scored {ctx.score_text}.")
        return ModeSignal.POP

    def frame(self) -> ModeFrame[QuizContext]:
        return ModeFrame(
            name="quiz",
            line_handler=self.handle_line,
            prompt=QUIZ_PROMPT,
            context=self.context,
        )


def open_quiz(
    runner: "SessionRunner", questions: Sequence[QuizQuestion] | None = None
) -> ModeFrame[QuizContext]:
    """Push a quiz over ``questions`` (the configured set by default)."""

    selected = tuple(questions if questions is not None else runner.config.quiz_questions)
    if not selected:
        raise InvalidInputError("the quiz has no questions")
    quiz = Quiz(QuizContext(questions=selected), console=runner.console)
    runner.console.echo("Starting quiz. Type your answer and press Enter.")
    frame = quiz.frame()
    runner.modes.push(frame)
    quiz.ask_current()
    return frame


__all__ = [
    "QUIZ_PROMPT",
    "Quiz",
    "QuizContext",
    "answer_matches",
    "open_quiz",
]
