"""
CLI commands for shell completion.

Generates click's completion script into the config directory and,
with ``--install``, sources it from the shell's rc file once.
"""

from __future__ import annotations

from pathlib import Path

import click
from click.shell_completion import get_completion_class

_RC_FILES = {
    "bash": ".bashrc",
    "zsh": ".zshrc",
}


def completion_var(prog_name: str) -> str:
    """Environment variable click reads to trigger completion."""
    return "_{}_COMPLETE".format(prog_name.replace("-", "_").upper())


def render_completion(root: click.Command, prog_name: str, shell: str) -> str:
    """Completion script source for ``shell``."""
    comp_cls = get_completion_class(shell)
    if comp_cls is None:
        raise click.ClickException(f"Unsupported shell '{shell}'")
    return comp_cls(root, {}, prog_name, completion_var(prog_name)).source()


def install_source_line(rc_file: Path, script: Path) -> bool:
    """Append ``source <script>`` to rc_file unless already present.

    Returns:
        True if the rc file was changed.
    """
    line = f"source {script}"
    existing = rc_file.read_text(encoding="utf-8") if rc_file.is_file() else ""
    if line in existing:
        return False
    with rc_file.open("a", encoding="utf-8") as fh:
        fh.write(f"\n{line}\n")
    return True


@click.command()
@click.option(
    "--shell",
    type=click.Choice(["bash", "zsh", "fish"]),
    default="bash",
    show_default=True,
    help="Target shell.",
)
@click.option("--install", is_flag=True, help="Write the script and source it from your shell rc.")
@click.pass_context
def completion(ctx: click.Context, shell: str, install: bool) -> None:
    """Print or install shell autocompletion."""
    from debian_bridge.core.config.loader import config_home

    root = ctx.find_root()
    prog_name = root.info_name or "debian-bridge"
    source = render_completion(root.command, prog_name, shell)

    if not install:
        click.echo(source)
        return

    if shell == "fish":
        script = Path.home() / ".config" / "fish" / "completions" / f"{prog_name}.fish"
    else:
        script = config_home() / f"{prog_name}.{shell}"

    try:
        script.parent.mkdir(parents=True, exist_ok=True)
        script.write_text(source, encoding="utf-8")
        changed = False
        if shell in _RC_FILES:
            changed = install_source_line(Path.home() / _RC_FILES[shell], script)
    except OSError as e:
        click.secho(f"❌ Can not install autocompletion: {e}", fg="red", err=True)
        click.echo(
            f"   You can do it manually by including {script} in your profile config",
            err=True,
        )
        raise SystemExit(1) from e

    click.secho(f"✅ Completion script written to {script}", fg="green")
    if changed:
        click.echo(f"   Restart your shell or run: source {script}")
