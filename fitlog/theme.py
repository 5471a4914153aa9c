from __future__ import annotations
from rich.console import Console
from rich.theme import Theme

# Styles partagés par la REPL, les tableaux du journal et la CLI typer
_theme = Theme({
    "ok": "bold green",
    "warn": "bold yellow",
    "err": "bold red",
    "muted": "grey50",
    "title": "bold white",
    "accent": "cyan",
    "you": "bold magenta",
    "tag": "italic cyan",
})


def make_console(**kwargs) -> Console:
    """Console thémée ; `record=True` / `file=...` pour capturer la sortie (tests)."""
    return Console(theme=_theme, **kwargs)


console = make_console()
print = console.print
