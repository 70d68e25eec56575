"""Interactive terminal presenter built on a rich Console."""

import logging
from typing import IO, List, Optional

from rich.console import Console

from survey_builder.answers import Answers
from survey_builder.backends.base import WalkingBackend
from survey_builder.config import SurveySettings
from survey_builder.errors import Cancelled, SurveyIOError, ValidationFailure
from survey_builder.interview import (
    Alternatives,
    ConfirmKind,
    ElementType,
    FloatKind,
    InputKind,
    Interview,
    IntKind,
    ListKind,
    MaskedKind,
    MultilineKind,
    Question,
    Validator,
)
from survey_builder.values import ResponseValue

logger = logging.getLogger(__name__)


def _parse_int(key: str, text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValidationFailure(key, f"'{text}' is not a whole number")


def _parse_float(key: str, text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValidationFailure(key, f"'{text}' is not a number")


_YES = ("y", "yes")
_NO = ("n", "no")


class ConsoleBackend(WalkingBackend):
    """Asks questions on a rich Console.

    Args:
        console: Output console (defaults to a new Console)
        stream: Input stream; stdin when None. Tests pass an io.StringIO.
        settings: Survey settings (list separator, multiline terminator, ...)
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        stream: Optional[IO[str]] = None,
        settings: Optional[SurveySettings] = None,
    ):
        super().__init__(settings)
        self.console = console or Console()
        self.stream = stream

    def execute(
        self,
        interview: Interview,
        answers: Optional[Answers] = None,
        field_validator: Optional[Validator] = None,
    ) -> Answers:
        try:
            return super().execute(interview, answers, field_validator)
        except (KeyboardInterrupt, EOFError):
            self.console.print()
            raise Cancelled()
        except OSError as e:
            raise SurveyIOError(f"Console I/O failed: {e}", cause=e)

    # Input -----------------------------------------------------------------

    def _read_line(self, prompt: str = "", password: bool = False) -> str:
        # getpass always reads from the terminal, never from an injected stream
        line = self.console.input(prompt, password=password and self.stream is None, stream=self.stream)
        if self.stream is not None and line == "":
            raise EOFError
        return line.rstrip("\r\n")

    def _label(self, question: Question, hint: str = "") -> str:
        label = f"[bold]{question.prompt}[/bold]"
        if hint:
            label += f" [dim]({hint})[/dim]"
        default = question.default
        if default is not None and not isinstance(question.kind, MaskedKind):
            if isinstance(default, tuple):
                default = self.settings.list_separator.join(str(item) for item in default)
            label += f" [cyan]\\[{default}][/cyan]"
        return label + " "

    def _read_text(self, question: Question, hint: str = "", password: bool = False) -> Optional[str]:
        """Read one line; empty input yields the default, or None."""
        text = self._read_line(self._label(question, hint), password=password).strip()
        if text:
            return text
        return None

    # Hooks -----------------------------------------------------------------

    def ask(self, question: Question, answers: Answers) -> Optional[ResponseValue]:
        kind = question.kind
        key = question.key

        if isinstance(kind, ConfirmKind):
            return ResponseValue.boolean(self._ask_confirm(question, kind))

        if isinstance(kind, MultilineKind):
            return self._ask_multiline(question)

        if isinstance(kind, MaskedKind):
            text = self._read_text(question, password=True)
            return ResponseValue.string(text) if text is not None else None

        hint = ""
        if isinstance(kind, (IntKind, FloatKind)) and (kind.min is not None or kind.max is not None):
            hint = f"{'' if kind.min is None else kind.min}..{'' if kind.max is None else kind.max}"
        elif isinstance(kind, ListKind):
            hint = f"separate items with '{self.settings.list_separator}'"

        text = self._read_text(question, hint)
        if text is None and question.default is None:
            return None

        if isinstance(kind, InputKind):
            value = text if text is not None else kind.default
            if kind.path:
                return ResponseValue.path(value)
            return ResponseValue.string(value)

        if isinstance(kind, IntKind):
            return ResponseValue.integer(_parse_int(key, text) if text is not None else kind.default)

        if isinstance(kind, FloatKind):
            return ResponseValue.number(_parse_float(key, text) if text is not None else kind.default)

        if isinstance(kind, ListKind):
            if text is None:
                return ResponseValue.items(kind.default)
            return ResponseValue.items(self._parse_items(key, kind, text))

        raise ValidationFailure(key, f"Unsupported question kind {type(kind).__name__}")

    def _parse_items(self, key: str, kind: ListKind, text: str) -> List[ResponseValue]:
        parts = [part.strip() for part in text.split(self.settings.list_separator) if part.strip()]
        if kind.element == ElementType.INT:
            return [ResponseValue.integer(_parse_int(key, part)) for part in parts]
        if kind.element == ElementType.FLOAT:
            return [ResponseValue.number(_parse_float(key, part)) for part in parts]
        return [ResponseValue.string(part) for part in parts]

    def _ask_confirm(self, question: Question, kind: ConfirmKind) -> bool:
        default = "y" if kind.default else "n"
        text = self._read_line(f"[bold]{question.prompt}[/bold] [magenta]\\[y/n][/magenta] [cyan]({default})[/cyan] ")
        text = text.strip().lower()
        if not text:
            return kind.default
        if text in _YES:
            return True
        if text in _NO:
            return False
        raise ValidationFailure(question.key, "Please answer y or n")

    def _ask_multiline(self, question: Question) -> Optional[ResponseValue]:
        terminator = self.settings.multiline_terminator
        ending = "an empty line" if not terminator else f"a line with '{terminator}'"
        self.console.print(f"[bold]{question.prompt}[/bold] [dim](finish with {ending})[/dim]")
        lines = []
        while True:
            line = self._read_line()
            if line.strip() == terminator:
                break
            lines.append(line)
        if not lines:
            if question.default is not None:
                return ResponseValue.string(question.default)
            return None
        return ResponseValue.string("\n".join(lines))

    def _print_options(self, alternatives: Alternatives) -> None:
        for number, alt in enumerate(alternatives.alternatives, start=1):
            self.console.print(f"  [cyan]{number}[/cyan]. {alt.display}")

    def choose(
        self,
        alternatives: Alternatives,
        prompt: Optional[str],
        answers: Answers,
        optional: bool = False,
    ) -> Optional[int]:
        self.console.print(f"[bold]{prompt or alternatives.prompt or 'Choose one'}[/bold]")
        self._print_options(alternatives)
        if optional:
            self.console.print("  [cyan]0[/cyan]. Skip")
        default = alternatives.default_index + 1
        text = self._read_line(f"Choice [cyan]({default})[/cyan] ").strip()
        if not text:
            return alternatives.default_index
        number = _parse_int(alternatives.key, text)
        if number == 0 and optional:
            return None
        return number - 1

    def choose_many(self, question: Question, answers: Answers) -> Optional[ResponseValue]:
        kind = question.kind
        self.console.print(f"[bold]{question.prompt}[/bold]")
        self._print_options(kind.variants)
        text = self._read_line("Choices (numbers separated by ',', empty for none) ").strip()
        if not text:
            if kind.default is not None:
                return ResponseValue.chosen_variants(kind.default)
            return ResponseValue.chosen_variants([])

        indices = []
        for part in text.split(","):
            part = part.strip()
            if not part:
                continue
            number = _parse_int(question.key, part)
            if number < 1:
                raise ValidationFailure(question.key, f"Unknown choice {number}")
            indices.append(number - 1)
        return ResponseValue.chosen_variants(indices)

    def report_error(self, key: str, error: ValidationFailure) -> None:
        super().report_error(key, error)
        self.console.print(f"[red]✗[/red] {error.message}")

    def show_message(self, text: str) -> None:
        self.console.print(text)
