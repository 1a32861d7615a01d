"""
Rich console helpers shared by the optimizers and the command line.

Library code stays quiet unless a ``Console`` is handed in; without one,
messages go to the standard ``logging`` module instead.
"""

import contextlib
import datetime
import logging
import os

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.rule import Rule
from rich.text import Text

logger = logging.getLogger(__name__)


def setup_console(log_path=None, width=120):
    """
    Create the Console used for human-facing output.

    Parameters
    ----------
    log_path : str, optional
        If given, the parent directory is created so that messages can be
        mirrored into that file.
    width : int
        Console width in characters.

    Returns
    -------
    rich.console.Console
    """
    if log_path:
        log_dir = os.path.dirname(log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
    return Console(log_path=False, width=width, legacy_windows=False)


def _print(console, output, log_path=None):
    console.print(output)
    if log_path:
        with open(log_path, "a") as f, contextlib.redirect_stdout(f), contextlib.redirect_stderr(f):
            Console(file=f, width=console.width, no_color=True).print(output)


def log_message(console, message, emoji=None, panel=False, timestamp=True,
                log_path=None, title="Stats", border_style="cyan"):
    """
    Log a message with an optional emoji, timestamp and panel.

    Parameters
    ----------
    console : Console or None
        Target console; ``None`` routes the message to ``logging``.
    message : str
        Message to log.
    emoji : str, optional
        Emoji prepended to the message.
    panel : bool
        Wrap the message in a panel.
    timestamp : bool
        Prefix the current time.
    log_path : str, optional
        File that also receives the message.
    title, border_style : str
        Panel title and border style.
    """
    if console is None:
        logger.info(message)
        return

    timestamp_str = datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S') if timestamp else ""
    emoji_str = f" {emoji}" if emoji else ""
    log_text = f"{timestamp_str}{emoji_str} {message}".strip()

    output = Panel(log_text, title=title, border_style=border_style) if panel else log_text
    _print(console, output, log_path)


def log_error(console, error_message, exception=None, log_path=None):
    """Log an error panel, including the exception type and message when given."""
    if console is None:
        logger.error("%s%s", error_message, f" ({exception!r})" if exception else "")
        return

    timestamp = datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    error_text = Text()
    error_text.append(f"[{timestamp}] ", style="dim")
    error_text.append("❌ ERROR: ", style="bold red")
    error_text.append(error_message, style="red")
    if exception:
        error_text.append("\n  Exception: ", style="dim")
        error_text.append(f"{type(exception).__name__}: {exception}", style="yellow")

    _print(console, Panel(error_text, title="Error", border_style="red", expand=False), log_path)


def create_stage_rule(title, style="bold blue"):
    return Rule(title, style=style)


def create_progress_display(label, iteration, size, best_value, mean_value=None, diversity=None):
    """One-line status of a generation or iteration."""
    text = Text()
    text.append(f"{label} ", style="bold cyan")
    text.append(f"{iteration}", style="bold yellow")
    text.append(" | 👥 Size: ", style="cyan")
    text.append(f"{size}", style="yellow")
    text.append(" | 🏆 Best: ", style="green")
    text.append(f"{best_value:.6f}", style="bold green")
    if mean_value is not None:
        text.append(" | 📊 Mean: ", style="blue")
        text.append(f"{mean_value:.6f}", style="bold blue")
    if diversity is not None:
        text.append(" | 🌀 Diversity: ", style="magenta")
        text.append(f"{diversity:.6f}", style="bold magenta")
    return text


def create_optimization_summary_panel(result, names=(), title="Optimization Complete"):
    """Summary panel of a finished run."""
    meta = result.metadata
    summary = Text()
    summary.append("🎯 ", style="bold green")
    summary.append(f"{meta.algorithm} results\n\n", style="bold green")
    summary.append("📈 Iterations: ", style="cyan")
    summary.append(f"{meta.iterations}\n", style="bold yellow")
    summary.append("🧮 Evaluations: ", style="cyan")
    summary.append(f"{meta.evaluations} ({meta.degenerate_evaluations} degenerate)\n", style="bold yellow")
    summary.append(f"🏆 Best ({result.sense.value}): ", style="green")
    summary.append(f"{result.value:.6f}\n", style="bold green")
    for i, value in enumerate(result.position):
        name = names[i] if i < len(names) else f"x{i}"
        summary.append(f"   {name}: ", style="blue")
        summary.append(f"{value:.6f}\n", style="bold blue")
    summary.append("🔄 Converged: ", style="cyan")
    summary.append(f"{meta.converged} (last improvement {meta.iterations_since_improvement} iters ago)\n",
                   style="bold yellow")
    summary.append("⏱️  Total Time: ", style="magenta")
    summary.append(f"{meta.elapsed_seconds:.2f}s", style="bold magenta")
    return Panel(summary, title=title, border_style="green", expand=False)


def create_progress_bar(console):
    """Progress bar over generations/iterations, transient once finished."""
    return Progress(
        SpinnerColumn(spinner_name="dots12"),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(bar_width=None),
        "•",
        TaskProgressColumn(text_format="[progress.percentage]{task.percentage:>5.1f}%", show_speed=True),
        "•",
        TimeElapsedColumn(),
        "•",
        TimeRemainingColumn(),
        console=console,
        transient=True,
    )
