"""Click-based CLI for revive.

Inspect a cache from the shell:

    revive list
    revive read model
    revive read report.md --file
    revive deps final
    revive seed
"""

import logging
import os
import sys
from functools import wraps
from typing import Any

import click
import yaml

from revive import __version__
from revive.exceptions import CacheUnreachable, ReviveException
from revive.log import logger
from revive.store import CONFIG_NAMESPACE, Store, get_cache

logger = logger.getChild(__name__)


class ReviveContext:
    """Context object passed to all commands."""

    def __init__(self, cd: str = ".", quiet: int = 0, verbose: int = 0):
        self.cd = cd
        self.quiet = quiet
        self.verbose = verbose
        self._cache: Store | None = None

    @property
    def cache(self) -> Store:
        """Lazily locate the cache."""
        if self._cache is None:
            self._cache = get_cache(path=self.cd)
            if self._cache is None:
                raise CacheUnreachable(os.path.abspath(self.cd))
        return self._cache


pass_context = click.make_pass_decorator(ReviveContext, ensure=True)


def with_cache(f):
    """Decorator passing the located cache as the first argument."""
    @wraps(f)
    @pass_context
    def wrapper(ctx, *args, **kwargs):
        return f(ctx.cache, *args, **kwargs)
    return wrapper


def _dump(value: Any) -> str:
    """Render a value as YAML when it serializes, repr otherwise."""
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    elif hasattr(value, "to_records"):
        value = value.to_records()
    if value is None or isinstance(value, (str, int, float, bool)):
        return str(value)
    try:
        return yaml.safe_dump(value, sort_keys=False, default_flow_style=False).rstrip()
    except yaml.YAMLError:
        return repr(value)


@click.group(invoke_without_command=True)
@click.option("-C", "--cd", default=".", help="Look for the cache starting from this directory.", metavar="<path>")
@click.option("-q", "--quiet", count=True, help="Be quiet.")
@click.option("-v", "--verbose", count=True, help="Be verbose.")
@click.version_option(__version__, "-V", "--version", prog_name="revive")
@click.pass_context
def cli(ctx, cd: str, quiet: int, verbose: int):
    """revive - inspect and reload cached workflow targets."""
    ctx.obj = ReviveContext(cd=cd, quiet=quiet, verbose=verbose)

    level = None
    if quiet:
        level = logging.CRITICAL
    elif verbose:
        level = logging.DEBUG

    if level is not None:
        from revive.logger import set_loggers_level
        ctx.with_resource(set_loggers_level(level))

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command("read")
@click.argument("target")
@click.option("-n", "--namespace", help="Namespace to read from.")
@click.option("--file", "is_file_target", is_flag=True, help="TARGET is a tracked file path.")
@with_cache
def read_cmd(cache: Store, target: str, namespace: str | None, is_file_target: bool):
    """Print the cached value of TARGET."""
    from revive.keys import file_store
    from revive.read import readd

    if is_file_target:
        target = file_store(target)
    click.echo(_dump(readd(target, cache=cache, namespace=namespace)))


@cli.command("list")
@click.option("-n", "--namespace", help="Namespace to list.")
@with_cache
def list_cmd(cache: Store, namespace: str | None):
    """List cached keys."""
    from revive.read import cached

    for key in cached(cache=cache, namespace=namespace):
        click.echo(key)


@cli.command("imported")
@click.option("-j", "--jobs", type=int, default=1, help="Number of parallel jobs.")
@with_cache
def imported_cmd(cache: Store, jobs: int):
    """List cached imports."""
    from revive.read import imported

    for key in imported(cache=cache, jobs=jobs):
        click.echo(key)


@cli.command("built")
@click.option("-j", "--jobs", type=int, default=1, help="Number of parallel jobs.")
@with_cache
def built_cmd(cache: Store, jobs: int):
    """List cached targets built by the workflow."""
    from revive.read import built

    for key in built(cache=cache, jobs=jobs):
        click.echo(key)


@cli.command("deps")
@click.argument("targets", nargs=-1, required=True)
@click.option("-j", "--jobs", type=int, default=1, help="Number of parallel jobs.")
@with_cache
def deps_cmd(cache: Store, targets: tuple[str, ...], jobs: int):
    """List the cached dependencies of TARGETS."""
    from revive.graph import existing_dependencies
    from revive.keys import standardize_key
    from revive.read import read_graph

    graph = read_graph(cache=cache)
    seeds = {standardize_key(t) for t in targets}
    for key in sorted(existing_dependencies(seeds, graph, cache, jobs=jobs)):
        click.echo(key)


@cli.command("graph")
@with_cache
def graph_cmd(cache: Store):
    """Print the cached dependency graph."""
    from revive.read import read_graph

    click.echo(_dump(read_graph(cache=cache)))


@cli.command("plan")
@with_cache
def plan_cmd(cache: Store):
    """Print the cached workflow plan."""
    from revive.read import read_plan

    plan = read_plan(cache=cache)
    if not len(plan):
        click.echo("No plan cached.")
        return
    click.echo(_dump(plan))


@cli.command("seed")
@with_cache
def seed_cmd(cache: Store):
    """Print the project's pseudo-random seed."""
    from revive.read import read_seed

    click.echo(read_seed(cache=cache))


@cli.command("config")
@with_cache
def config_cmd(cache: Store):
    """List the keys of the cached build configuration."""
    for key in cache.list(CONFIG_NAMESPACE):
        click.echo(key)


def main(argv=None):
    """Main entry point."""
    try:
        cli(argv, standalone_mode=False)
        return 0
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.Abort:
        return 1
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0
    except CacheUnreachable:
        logger.exception("")
        return 253
    except ReviveException:
        logger.exception("")
        return 255
    except Exception:
        logger.exception("unexpected error")
        return 255


if __name__ == "__main__":
    sys.exit(main())
