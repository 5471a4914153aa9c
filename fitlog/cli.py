# fitlog/cli.py
from __future__ import annotations
import logging

import typer
from rich.table import Table

from .theme import print
from .log import setup_logging
from .config import DATA_DIR, DEBUG
from .core.results import Err
from .features.repl import build_shell
from .storage.files import StorageError
from .storage.months import MonthStore
from .ui.console import Answer, FixedConfirmer
from .utils.envtools import write_env_example, check_env

app = typer.Typer(help="fitlog : journal de séances en ligne de commande.")


# ──────────────────────────────────────────────────────────────────────────────
# Init / logging
# ──────────────────────────────────────────────────────────────────────────────
@app.callback(invoke_without_command=True)
def _init(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Logs détaillés."),
    data_dir: str = typer.Option(DATA_DIR, "--data-dir", help="Racine des données (FITLOG_DATA_DIR)."),
):
    setup_logging(logging.DEBUG if verbose or DEBUG else logging.INFO)
    ctx.obj = {"data_dir": data_dir}
    if ctx.invoked_subcommand is None:
        shell(ctx)


def _abort(e: StorageError) -> None:
    print(f"[err]Storage error:[/] {e}")
    raise typer.Exit(code=1)


# ──────────────────────────────────────────────────────────────────────────────
# Journal
# ──────────────────────────────────────────────────────────────────────────────
@app.command("shell")
def shell(ctx: typer.Context):
    """Session interactive (commande par défaut)."""
    try:
        repl = build_shell(ctx.obj["data_dir"])
    except StorageError as e:
        _abort(e)
    repl.loop()


@app.command("run")
def run(
    ctx: typer.Context,
    command: str = typer.Argument(..., help='Une commande, ex: "/add_set r/12".'),
    yes: bool = typer.Option(False, "--yes", "-y", help="Répond oui à toutes les confirmations."),
):
    """Exécute une seule commande sans interaction (code retour 1 en cas d'erreur)."""
    confirm = FixedConfirmer(Answer.YES if yes else Answer.NO)
    try:
        repl = build_shell(ctx.obj["data_dir"], confirm=confirm)
    except StorageError as e:
        _abort(e)
    if isinstance(repl.execute(command), Err):
        raise typer.Exit(code=1)


@app.command("months")
def months(ctx: typer.Context):
    """Liste les mois présents sur disque et leur nombre de séances."""
    store = MonthStore(ctx.obj["data_dir"])
    try:
        found = store.index()
        counts = [(m, len(store.load(m)), store.skipped(m)) for m in found]
    except StorageError as e:
        _abort(e)

    if not found:
        print("[muted]No workouts logged yet.[/]")
        return
    table = Table(title="Months on disk", show_header=True, header_style="accent")
    table.add_column("Month")
    table.add_column("Workouts", justify="right")
    table.add_column("Skipped", justify="right")
    for month, n, skipped in counts:
        table.add_row(str(month), str(n), f"[warn]{skipped}[/]" if skipped else "0")
    print(table)


# ──────────────────────────────────────────────────────────────────────────────
# ENV
# ──────────────────────────────────────────────────────────────────────────────
@app.command("env-example")
def env_example(
    force: bool = typer.Option(
        False, "--force", "-f", help="Écrase .env.example s’il existe déjà."
    )
):
    """Génère un fichier .env.example à la racine du projet."""
    path = write_env_example(overwrite=force)
    print(
        f"[ok]Fichier d’exemple généré : [bold]{path}[/] "
        "(duplique-le en .env et ajuste les valeurs)."
    )


@app.command("env-check")
def env_check():
    """Affiche la configuration effective et signale les valeurs invalides."""
    values, errors = check_env()

    table = Table(
        title="Vérification de l'environnement",
        show_header=True,
        header_style="accent",
    )
    table.add_column("Clé")
    table.add_column("Valeur")
    table.add_column("OK ?")
    for k, v in values.items():
        table.add_row(k, v or "[muted](défaut)[/]", "❌" if k in errors else "✅")
    print(table)

    if errors:
        print("[err]Valeurs invalides :[/]")
        for k, why in errors.items():
            print(f" • [bold]{k}[/]: {why}")
        raise typer.Exit(code=1)
    print("[ok]Environnement prêt ✔[/]")


if __name__ == "__main__":
    app()
