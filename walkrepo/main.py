# main.py
import logging
import sys
from pathlib import Path
import click

from walkrepo.errors import WalkRepoError
from walkrepo.gitignore import RULE_FILE_NAME
from walkrepo.models import WalkOptions
from walkrepo.renderer import Renderer
from walkrepo.tree import build_file_tree
from walkrepo.walker import ignore_status

# Patterns the CLI excludes unless --all is given
DEFAULT_EXCLUDES = (".git",)


def _configure_logging(verbose: bool):
    if verbose:
        logging.basicConfig(
            stream=sys.stderr,
            level=logging.DEBUG,
            format='%(asctime)s - %(levelname)s - %(message)s'
        )


def _build_options(exclude, rule_files, follow_symlinks, show_all) -> WalkOptions:
    excludes = tuple(exclude) if show_all else DEFAULT_EXCLUDES + tuple(exclude)
    return WalkOptions(
        rule_files=tuple(rule_files) or (RULE_FILE_NAME,),
        exclude=excludes,
        follow_symlinks=follow_symlinks,
    )


def walk_options(func):
    """Options shared by every subcommand that walks a tree."""
    func = click.option("-v", "--verbose", is_flag=True,
                        help="Log rule files and excluded entries to stderr.")(func)
    func = click.option("-a", "--all", "show_all", is_flag=True,
                        help=f"Do not exclude {', '.join(DEFAULT_EXCLUDES)} by default.")(func)
    func = click.option("--follow-symlinks", is_flag=True,
                        help="Descend into symlinked directories.")(func)
    func = click.option("--rule-file", "rule_files", multiple=True, metavar="NAME",
                        help=f"Name of per-directory rule files (default: {RULE_FILE_NAME}). Repeatable.")(func)
    func = click.option("-e", "--exclude", multiple=True, metavar="PATTERN",
                        help="Extra ignore pattern applied at the root. Repeatable.")(func)
    return func


@click.group()
def cli():
    """
    Walks a directory tree, honoring every .gitignore found along the way.

    Patterns in a directory's rule file apply to that directory and below;
    the last matching pattern wins, so deeper "!pattern" lines can re-include
    paths an ancestor excluded.
    """


@cli.command("ls")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default='.')
@walk_options
def ls_command(path, exclude, rule_files, follow_symlinks, show_all, verbose):
    """List every entry the walk visits, relative to PATH."""
    _configure_logging(verbose)
    options = _build_options(exclude, rule_files, follow_symlinks, show_all)
    try:
        root = build_file_tree(str(Path(path).resolve()), options)
    except WalkRepoError as e:
        raise click.ClickException(str(e))
    output = Renderer([root]).render_list()
    if output:
        click.echo(output)


@cli.command("tree")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default='.')
@click.option("-L", "--level", type=click.IntRange(min=1), default=None,
              help="Descend at most this many directory levels.")
@walk_options
def tree_command(path, level, exclude, rule_files, follow_symlinks, show_all, verbose):
    """Print an ASCII tree of the entries the walk visits."""
    _configure_logging(verbose)
    options = _build_options(exclude, rule_files, follow_symlinks, show_all)
    try:
        root = build_file_tree(str(Path(path).resolve()), options, max_depth=level)
    except WalkRepoError as e:
        raise click.ClickException(str(e))
    click.echo(Renderer([root]).render_tree())


@cli.command("check")
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.argument("paths", nargs=-1, required=True)
@walk_options
@click.pass_context
def check_command(ctx, root, paths, exclude, rule_files, follow_symlinks, show_all, verbose):
    """
    Report whether each of PATHS (relative to ROOT) is excluded, and by which pattern.

    Exits with status 0 if at least one path is excluded, 1 otherwise.
    """
    _configure_logging(verbose)
    options = _build_options(exclude, rule_files, follow_symlinks, show_all)
    any_excluded = False
    for rel_path in paths:
        try:
            status = ignore_status(root, rel_path, options)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="PATHS")
        except WalkRepoError as e:
            raise click.ClickException(str(e))

        any_excluded = any_excluded or status.excluded
        verdict = "excluded" if status.excluded else "included"
        line = f"{verdict}\t{status.path}"
        if status.pattern is not None:
            line += f"\t{status.source or '<exclude>'}:{status.pattern}"
        if status.pruned_by:
            line += f"\t(inside {status.pruned_by}/)"
        click.echo(line)

    if not any_excluded:
        ctx.exit(1)


if __name__ == "__main__":
    cli()
