"""Command line tool for inspecting how a target list distributes keys."""

from __future__ import annotations

import functools
import time
from collections import Counter
from typing import Any, Callable, Dict, List, Optional, Tuple

import click

from flexiring.config.ring_config import RingConfig
from flexiring.exceptions import HashRingError
from flexiring.hashers import HasherName
from flexiring.monitoring.metrics import generate_latest
from flexiring.ring import HashRing
from flexiring.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _load_config(
    config_path: Optional[str],
    targets: Tuple[str, ...],
    hasher: Optional[str],
    replicas: Optional[int],
) -> RingConfig:
    overrides: Dict[str, Any] = {}
    if hasher is not None:
        overrides["hasher"] = hasher
    if replicas is not None:
        overrides["replicas"] = replicas

    if config_path:
        base = RingConfig.from_yaml(config_path)
    else:
        base = RingConfig.from_env()

    if targets:
        # -t replaces FLEXIRING_TARGETS, other settings still come from env
        settings = {"name": base.name, "hasher": base.hasher, "replicas": base.replicas}
        return RingConfig.from_specs(list(targets), **{**settings, **overrides})

    if not overrides:
        return base
    return RingConfig(**{**base.model_dump(), **overrides})


def _handle_errors(func: Callable[..., None]) -> Callable[..., None]:
    """Report caller-input errors as a clean CLI failure."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (HashRingError, ValueError) as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _ring(ctx: click.Context) -> HashRing:
    obj = ctx.ensure_object(dict)
    if "ring" not in obj:
        config = _load_config(
            obj.get("config_path"),
            obj.get("targets", ()),
            obj.get("hasher"),
            obj.get("replicas"),
        )
        obj["ring"] = HashRing.from_config(config)
        logger.info("ring_built", ring=repr(obj["ring"]))
    return obj["ring"]


@click.group()
@click.option(
    "-t",
    "--target",
    "targets",
    multiple=True,
    help="Target as NAME or NAME=WEIGHT (repeatable).",
)
@click.option(
    "--hasher",
    type=click.Choice([h.value for h in HasherName], case_sensitive=False),
    default=None,
    help="Position hasher.",
)
@click.option("--replicas", type=click.IntRange(min=1), default=None, help="Replicas per target.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML ring configuration (default: FLEXIRING_* environment).",
)
@click.option("--log-level", default="WARNING", show_default=True, help="Logging level.")
@click.pass_context
def cli(
    ctx: click.Context,
    targets: Tuple[str, ...],
    hasher: Optional[str],
    replicas: Optional[int],
    config_path: Optional[str],
    log_level: str,
) -> None:
    """Inspect consistent hash ring placement."""
    if config_path and targets:
        raise click.UsageError("--config and --target cannot be combined")
    configure_logging(level=log_level, json_output=False)
    ctx.ensure_object(dict).update(
        targets=targets,
        hasher=hasher,
        replicas=replicas,
        config_path=config_path,
    )


@cli.command()
@click.argument("resource")
@click.option("-n", "--count", type=int, default=1, show_default=True, help="Targets to return.")
@click.pass_context
@_handle_errors
def lookup(ctx: click.Context, resource: str, count: int) -> None:
    """Print the targets responsible for RESOURCE, in preference order."""
    ring = _ring(ctx)
    if count == 1:
        click.echo(ring.lookup(resource))
        return
    for target in ring.lookup_list(resource, count):
        click.echo(target)


@cli.command()
@click.pass_context
@_handle_errors
def targets(ctx: click.Context) -> None:
    """Print the registered targets."""
    for target in _ring(ctx).get_all_targets():
        click.echo(target)


@cli.command()
@click.option("--keys", type=click.IntRange(min=1), default=1000, show_default=True)
@click.option("--prefix", default="key-", show_default=True, help="Generated key prefix.")
@click.pass_context
@_handle_errors
def distribution(ctx: click.Context, keys: int, prefix: str) -> None:
    """Look up KEYS generated keys and print how many land on each target."""
    ring = _ring(ctx)
    counts: Counter = Counter(ring.lookup(f"{prefix}{i}") for i in range(keys))
    for target in ring.get_all_targets():
        hits = counts.get(target, 0)
        click.echo(f"{target}\t{hits}\t{hits / keys:.2%}")


def _time_per_op(func: Callable[[], Any], iterations: int) -> float:
    start = time.perf_counter()
    for _ in range(iterations):
        func()
    return (time.perf_counter() - start) / iterations * 1e6


@cli.command()
@click.option("--iterations", type=click.IntRange(min=1), default=1000, show_default=True)
@click.option("--weight", type=click.IntRange(min=1), default=10, show_default=True)
@click.pass_context
@_handle_errors
def bench(ctx: click.Context, iterations: int, weight: int) -> None:
    """Time add_target and lookup_list with the configured hasher."""
    template = _ring(ctx)

    def fresh(*names: str) -> HashRing:
        ring = HashRing(hasher=template.hasher, replicas=template.replicas, name="bench")
        for name in names:
            ring.add_target(name, weight)
        return ring

    results: List[Tuple[str, float]] = [
        ("new", _time_per_op(lambda: HashRing(name="bench"), iterations)),
        ("add_target/one", _time_per_op(lambda: fresh("olive"), iterations)),
        ("add_target/two", _time_per_op(lambda: fresh("olive", "acacia"), iterations)),
        (
            "add_target/many",
            _time_per_op(lambda: fresh(*(f"olive{n}" for n in range(10))), max(1, iterations // 10)),
        ),
    ]

    one = fresh("olive")
    two = fresh("olive", "acacia")
    for label, ring, count in (
        ("lookup_list/one_of_one", one, 1),
        ("lookup_list/one_of_two", two, 1),
        ("lookup_list/two_of_two", two, 2),
        ("lookup_list/three_of_two", two, 3),
    ):
        results.append((label, _time_per_op(lambda: ring.lookup_list("foobar", count), iterations)))

    for label, micros in results:
        click.echo(f"{label}\t{micros:.2f}us")


@cli.command()
@click.argument("resources", nargs=-1)
@click.pass_context
@_handle_errors
def metrics(ctx: click.Context, resources: Tuple[str, ...]) -> None:
    """Look up RESOURCES, then print Prometheus metrics."""
    ring = _ring(ctx)
    for resource in resources:
        ring.lookup_list(resource, 1)
    click.echo(generate_latest().decode("utf-8"), nl=False)


if __name__ == "__main__":
    cli()
