"""Rich progress display for pipeline runs."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

console = Console()


class PipelineProgress:
    """A spinner per pipeline step plus persistent event lines.

    Usable without entering the context manager (nothing animates, events
    still print), and silent when given ``Console(quiet=True)``.
    """

    def __init__(self, output: Console | None = None) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=output or console,
        )
        self._task_ids: dict[str, int] = {}
        self.tokens: dict[str, tuple[int, int]] = {}

    @classmethod
    def quiet(cls) -> "PipelineProgress":
        return cls(Console(quiet=True))

    def __enter__(self) -> "PipelineProgress":
        self._progress.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        self._progress.__exit__(*args)

    def start_step(self, step: str) -> None:
        tid = self._progress.add_task(f"[cyan]{step}[/]", total=None)
        self._task_ids[step] = tid

    def update_step(self, step: str, status: str) -> None:
        if step in self._task_ids:
            self._progress.update(
                self._task_ids[step], description=f"[cyan]{step}[/]: {status}",
            )

    def finish_step(self, step: str) -> None:
        if step in self._task_ids:
            self._progress.update(
                self._task_ids[step], description=f"[green]✓ {step}[/]", completed=True,
            )

    def skip_step(self, step: str, reason: str) -> None:
        """Mark a degradable step as skipped; the run continues."""
        if step in self._task_ids:
            self._progress.update(
                self._task_ids[step],
                description=f"[yellow]⚠ {step}: {reason}[/]",
                completed=True,
            )

    def fail_step(self, step: str, error: str) -> None:
        if step in self._task_ids:
            self._progress.update(
                self._task_ids[step], description=f"[red]✗ {step}: {error}[/]", completed=True,
            )

    def record_tokens(self, step: str, input_tokens: int, output_tokens: int) -> None:
        prev_in, prev_out = self.tokens.get(step, (0, 0))
        self.tokens[step] = (prev_in + input_tokens, prev_out + output_tokens)

    def log_event(self, step: str, message: str, style: str = "dim") -> None:
        """Print a persistent log line above the spinner (not overwritten)."""
        self._progress.console.print(f"  [{style}]{step}:[/] {message}")

    def print_phase(self, label: str) -> None:
        self._progress.console.print(Panel(f"[bold]{label}[/bold]", style="blue"))
