"""
sigtrace Command Line Interface.

Commands:
- sigtrace run <simulation.yaml>      : Trace rays and record successful paths
- sigtrace validate <simulation.yaml> : Validate a simulation file
- sigtrace summarize <ray_data.csv>   : Summarize a recorded run
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from sigtrace import __version__

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(path: Path):
    from sigtrace.config.loader import SimulationLoader, SimulationLoadError

    try:
        return SimulationLoader(path).load()
    except SimulationLoadError as e:
        console.print(f"[red]✗ Simulation file invalid:[/]\n{e}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="sigtrace")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def main(verbose: bool) -> None:
    """sigtrace - stochastic signal propagation ray tracing

    Casts rays from a transmitter, reflects them off opaque surfaces,
    refracts them through foliage, and records every path reaching the
    receiver.
    """
    setup_logging(verbose)


@main.command()
@click.argument("config", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output-dir", type=click.Path(path_type=Path), default=None,
              help="Base directory for Run_* folders (overrides output.base_dir)")
@click.option("-n", "--num-rays", type=int, default=None, help="Number of rays to cast")
@click.option("--seed", type=int, default=None, help="Seed for direction sampling")
@click.option("--workers", type=int, default=None, help="Number of tracing threads")
def run(
    config: Path,
    output_dir: Path | None,
    num_rays: int | None,
    seed: int | None,
    workers: int | None,
) -> None:
    """Run a ray tracing simulation.

    CONFIG is the path to a simulation.yaml file.
    """
    from pydantic import ValidationError

    from sigtrace.config.schema import TracingParams
    from sigtrace.recorder import CsvPathRecorder, RecorderError, create_run_directory
    from sigtrace.scene.builder import SceneBuilder, SceneError
    from sigtrace.tracing.driver import SimulationDriver

    sim = _load_config(config)

    overrides = {
        k: v for k, v in
        {"num_rays": num_rays, "seed": seed, "workers": workers}.items()
        if v is not None
    }
    try:
        params = TracingParams.model_validate({**sim.tracing.model_dump(), **overrides})
    except ValidationError as e:
        console.print(f"[red]✗ Invalid option:[/] {e}")
        sys.exit(1)

    console.print(f"[bold blue]Running simulation:[/] {sim.name}")

    try:
        builder = SceneBuilder(sim.scene)
        transmitter = builder.find_transmitter()
        scene = builder.build()
        for w in builder.validate_scene(params.interaction_tags):
            console.print(f"[yellow]⚠ Scene warning:[/] {w}")

        run_dir = create_run_directory(output_dir or sim.output.base_dir)
        csv_path = run_dir / sim.output.file_name
        with CsvPathRecorder(csv_path, flush_every=sim.output.flush_every) as recorder:
            driver = SimulationDriver(scene, params, recorder)
            hit_count = driver.run(transmitter)
    except (SceneError, RecorderError) as e:
        console.print(f"[bold red]Simulation failed:[/] {e}")
        sys.exit(1)

    table = Table(title="Ray Tracing Summary")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Rays", str(params.num_rays))
    table.add_row("Hits", str(hit_count))
    table.add_row("Hit ratio", f"{hit_count / params.num_rays:.4f}")
    table.add_row("Max reflections", str(params.max_reflections))
    table.add_row("Output", str(csv_path))
    console.print(table)


@main.command()
@click.argument("config", type=click.Path(exists=True, path_type=Path))
def validate(config: Path) -> None:
    """Validate a simulation file.

    Checks the simulation file for errors and prints a summary.
    """
    from sigtrace.scene.builder import SceneBuilder, get_scene_info

    console.print(f"[bold blue]Validating:[/] {config}")
    sim = _load_config(config)
    console.print("[green]✓ Simulation syntax valid[/]")

    params = sim.tracing
    table = Table(title="Simulation Summary")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Name", sim.name)
    table.add_row("Rays", str(params.num_rays))
    table.add_row("Max reflections", str(params.max_reflections))
    table.add_row("Max ray distance", f"{params.max_ray_distance:g} m")
    table.add_row("Foliage permittivity", f"{params.foliage_permittivity:g}")
    table.add_row(
        "Interaction tags",
        ", ".join(sorted(params.interaction_tags)) if params.interaction_tags else "all",
    )
    table.add_row("Output", f"{sim.output.base_dir}/Run_*/{sim.output.file_name}")
    console.print(table)

    info = get_scene_info(sim.scene)
    if info["objects"]:
        tag_table = Table(title="Scene Objects")
        tag_table.add_column("Tag", style="cyan")
        tag_table.add_column("Count", justify="right")
        for tag, count in sorted(info["tags"].items()):
            tag_table.add_row(tag, str(count))
        console.print(tag_table)

    warnings = SceneBuilder(sim.scene).validate_scene(params.interaction_tags)
    if warnings:
        for w in warnings:
            console.print(f"[yellow]⚠ Scene warning:[/] {w}")
    else:
        console.print("[green]✓ Scene valid[/]")

    console.print("\n[green]Validation complete[/]")


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, path_type=Path))
@click.option("--limit", type=int, default=20, help="Maximum number of rays listed")
def summarize(csv_file: Path, limit: int) -> None:
    """Summarize a recorded ray_data.csv file."""
    from sigtrace.recorder import RecorderError, read_recorded_paths

    try:
        paths = read_recorded_paths(csv_file)
    except RecorderError as e:
        console.print(f"[red]✗ Cannot read recording:[/] {e}")
        sys.exit(1)

    console.print(f"[bold blue]Recorded rays:[/] {len(paths)}")
    if not paths:
        return

    table = Table(title="Recorded Paths")
    table.add_column("Ray", style="cyan", justify="right")
    table.add_column("Segments", justify="right")
    table.add_column("Path length", justify="right")
    table.add_column("Surfaces")
    for index in sorted(paths)[:limit]:
        rows = paths[index]
        table.add_row(
            str(index),
            str(len(rows)),
            f"{rows[-1]['totalDistance']:.3f} m" if rows else "-",
            "".join(r["hitTag"] for r in rows),
        )
    console.print(table)

    lengths = [rows[-1]["totalDistance"] for rows in paths.values() if rows]
    if lengths:
        console.print(
            f"Path length min/mean/max: {min(lengths):.3f} / "
            f"{sum(lengths) / len(lengths):.3f} / {max(lengths):.3f} m"
        )


if __name__ == "__main__":
    main()
