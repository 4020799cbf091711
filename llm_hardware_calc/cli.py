"""Click CLI for the LLM Hardware Calculator.

Commands:
- calculate: Estimate VRAM and RAM for a model
- recommend: Estimate memory and recommend GPU configurations
- gpus: List or search the GPU catalog
- quantizations: List supported quantization formats
- clear-cache: Remove the local catalog cache
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from llm_hardware_calc import __version__
from llm_hardware_calc.catalog import (
    DEFAULT_CATALOG_URL,
    CatalogClient,
    CatalogResult,
    FileCatalogCache,
    GpuCatalog,
    consumer_devices,
    search_devices,
    unified_devices,
    workstation_devices,
)
from llm_hardware_calc.diagnostics.logger import setup_logging
from llm_hardware_calc.models import (
    MemoryRequirement,
    ModelConfig,
    estimate_memory,
    get_quantization_spec,
    list_quantizations,
)
from llm_hardware_calc.recommend import (
    DEFAULT_MAX_GPU_COUNT,
    GpuRecommendation,
    RecommendationSet,
    recommend,
)
from llm_hardware_calc.utils.errors import InvalidModelConfigError

console = Console()
logger = logging.getLogger(__name__)

CATEGORIES = ("all", "consumer", "workstation", "unified")


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


def model_options(func):
    """Options shared by commands that take a model configuration."""
    options = [
        click.option("--params", "-p", type=float, required=True,
                     help="Model size in billions of parameters"),
        click.option("--quant", "-q", default="FP16", show_default=True,
                     help="Weight quantization (see 'quantizations')"),
        click.option("--kv-quant", default=None,
                     help="KV cache quantization (default: same as weights)"),
        click.option("--context", "-c", type=int, default=4096, show_default=True,
                     help="Context length in tokens"),
        click.option("--batch", "-b", type=int, default=1, show_default=True,
                     help="Concurrent sequences"),
        click.option("--unified", is_flag=True,
                     help="Unified memory system (Apple silicon, APU)"),
        click.option("--num-gpus", type=int, default=1, show_default=True,
                     help="GPUs to split the model across"),
        click.option("--json", "as_json", is_flag=True, help="Output JSON"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _estimate(
    params: float,
    quant: str,
    kv_quant: Optional[str],
    context: int,
    batch: int,
    unified: bool,
    num_gpus: int,
) -> MemoryRequirement:
    try:
        config = ModelConfig(
            parameters_billions=params,
            weight_quantization=quant,
            kv_quantization=kv_quant,
            context_length=context,
            batch_size=batch,
        )
        return estimate_memory(config, is_unified_memory=unified, num_gpus=num_gpus)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise click.UsageError(f"Invalid model configuration: {errors}")
    except InvalidModelConfigError as e:
        raise click.UsageError(str(e))


def _make_catalog(ctx) -> GpuCatalog:
    cache_dir = ctx.obj.get("cache_dir")
    return GpuCatalog(
        fetcher=CatalogClient(url=ctx.obj["catalog_url"]),
        cache=FileCatalogCache(cache_dir=Path(cache_dir) if cache_dir else None),
    )


def _warn_if_fallback(result: CatalogResult) -> None:
    if result.is_fallback:
        console.print(
            f"[yellow]GPU catalog unavailable, using {result.source.value.replace('_', ' ')} "
            f"data ({len(result.devices)} devices)[/]"
        )


def _print_requirement(req: MemoryRequirement, quant: str) -> None:
    table = Table(title="Memory Requirements")
    table.add_column("Component")
    table.add_column("GB", justify="right")

    table.add_row("Model weights", f"{req.model_size_gb:.2f}")
    table.add_row("KV cache", f"{req.kv_cache_gb:.2f}")
    table.add_row("Activations", f"{req.activation_gb:.2f}")
    table.add_row("Framework overhead", f"{req.overhead_gb:.2f}")
    table.add_section()

    if req.is_unified_memory:
        min_note = " (capped)" if req.min_exceeds_limit else ""
        rec_note = " (capped)" if req.rec_exceeds_limit else ""
        table.add_row("Unified memory (min)", f"{req.vram_min_gb:.2f}{min_note}")
        table.add_row("Unified memory (recommended)", f"{req.vram_rec_gb:.2f}{rec_note}")
    else:
        table.add_row("VRAM (min)", f"{req.vram_min_gb:.2f}")
        table.add_row("VRAM (recommended)", f"{req.vram_rec_gb:.2f}")
        if req.num_gpus > 1:
            table.add_row(f"VRAM per GPU (min, x{req.num_gpus})", f"{req.vram_per_gpu_min_gb:.2f}")
            table.add_row(f"VRAM per GPU (rec, x{req.num_gpus})", f"{req.vram_per_gpu_rec_gb:.2f}")
        table.add_row("System RAM (min)", f"{req.ram_min_gb:.2f}")
        table.add_row("System RAM (recommended)", f"{req.ram_rec_gb:.2f}")

    console.print(table)

    a = req.assumptions
    spec = get_quantization_spec(quant)
    label = spec.label if spec else f"{quant} (unknown, priced as FP16)"
    console.print(
        f"Assumptions: {label}, ~{a['est_layers']} layers, "
        f"hidden dim {a['est_hidden_dim']}, activation factor {a['activation_factor']:.0%}"
    )

    if req.rec_exceeds_limit:
        console.print(
            f"[yellow]Requirement exceeds the largest unified memory pool "
            f"({req.unified_memory_max_gb:g}GB); originally "
            f"{req.original_unified_rec_gb:.2f}GB[/]"
        )


def _describe(rec: GpuRecommendation) -> str:
    count = f"{rec.count}x " if rec.count > 1 else ""
    return f"{count}{rec.device.display_name}"


def _print_recommendations(recs: RecommendationSet, req: MemoryRequirement) -> None:
    if recs.is_empty:
        kind = "unified memory device" if recs.is_unified_memory else "GPU configuration"
        console.print(
            Panel(
                f"No compatible {kind} found for {req.vram_min_gb:.2f}GB minimum",
                title="[red]No Recommendation[/]",
            )
        )
        return

    table = Table(title="GPU Recommendations")
    table.add_column("Pick")
    table.add_column("Configuration")
    table.add_column("Total VRAM", justify="right")
    table.add_column("Perf", justify="right")
    table.add_column("Efficiency", justify="right")
    table.add_column("Meets Rec.")

    for label, rec in (
        ("Optimal", recs.optimal),
        ("Performance", recs.performance),
        ("Budget", recs.budget),
    ):
        table.add_row(
            label,
            _describe(rec),
            f"{rec.total_vram_gb:g}GB",
            f"{rec.performance_score:.0f}",
            f"{rec.efficiency_score:.0f}",
            "[green]yes[/]" if rec.meets_recommended else "[yellow]min only[/]",
        )

    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--catalog-url",
    envvar="LLM_HW_CATALOG_URL",
    default=DEFAULT_CATALOG_URL,
    help="GPU catalog JSON URL",
)
@click.option(
    "--cache-dir",
    envvar="LLM_HW_CACHE_DIR",
    type=click.Path(file_okay=False),
    default=None,
    help="Catalog cache directory (default: ~/.llm-hardware-calc)",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug logging",
)
@click.option(
    "--debug-http",
    is_flag=True,
    help="Enable verbose HTTP logging",
)
@click.pass_context
def cli(ctx, catalog_url: str, cache_dir: Optional[str], debug: bool, debug_http: bool):
    """LLM Hardware Calculator - memory needs and GPU picks for local LLMs."""
    ctx.ensure_object(dict)
    ctx.obj["catalog_url"] = catalog_url
    ctx.obj["cache_dir"] = cache_dir
    ctx.obj["debug"] = debug

    level = "DEBUG" if debug else "WARNING"
    setup_logging(level=level, debug_http=debug_http)


@cli.command()
@model_options
def calculate(
    params: float,
    quant: str,
    kv_quant: Optional[str],
    context: int,
    batch: int,
    unified: bool,
    num_gpus: int,
    as_json: bool,
):
    """Estimate VRAM and RAM needed to run a model."""
    req = _estimate(params, quant, kv_quant, context, batch, unified, num_gpus)

    if as_json:
        click.echo(json.dumps(req.to_dict(), indent=2))
        return

    _print_requirement(req, quant)


@cli.command("recommend")
@model_options
@click.option("--max-gpus", type=click.IntRange(1, 64), default=DEFAULT_MAX_GPU_COUNT,
              show_default=True, help="Most GPUs to combine")
@click.option("--refresh", is_flag=True, help="Re-download the GPU catalog")
@click.pass_context
def recommend_cmd(
    ctx,
    params: float,
    quant: str,
    kv_quant: Optional[str],
    context: int,
    batch: int,
    unified: bool,
    num_gpus: int,
    as_json: bool,
    max_gpus: int,
    refresh: bool,
):
    """Estimate memory and recommend GPU configurations."""
    req = _estimate(params, quant, kv_quant, context, batch, unified, num_gpus)
    catalog = _make_catalog(ctx)

    if as_json:
        result = run_async(catalog.load(force_refresh=refresh))
    else:
        with console.status("Loading GPU catalog..."):
            result = run_async(catalog.load(force_refresh=refresh))

    recs = recommend(req, result.devices, max_count=max_gpus)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "requirement": req.to_dict(),
                    "recommendations": recs.to_dict(),
                    "catalog": result.to_dict(),
                },
                indent=2,
            )
        )
        return

    _warn_if_fallback(result)
    _print_requirement(req, quant)
    _print_recommendations(recs, req)


@cli.command()
@click.option("--search", "-s", "query", default=None, help="Search query (e.g. 'rtx 30 series', '24gb')")
@click.option("--category", type=click.Choice(CATEGORIES), default="all", show_default=True,
              help="Device category")
@click.option("--limit", type=int, default=50, show_default=True, help="Maximum rows (0 for all)")
@click.option("--refresh", is_flag=True, help="Re-download the GPU catalog")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def gpus(ctx, query: Optional[str], category: str, limit: int, refresh: bool, as_json: bool):
    """List or search the GPU catalog."""
    result = run_async(_make_catalog(ctx).load(force_refresh=refresh))

    devices = list(result.devices)
    if category == "consumer":
        devices = consumer_devices(devices)
    elif category == "workstation":
        devices = workstation_devices(devices)
    elif category == "unified":
        devices = unified_devices(devices)

    if query:
        devices = search_devices(devices, query)

    total = len(devices)
    if limit:
        devices = devices[:limit]

    if as_json:
        click.echo(
            json.dumps(
                {
                    "catalog": result.to_dict(),
                    "total": total,
                    "devices": [d.model_dump(mode="json") for d in devices],
                },
                indent=2,
            )
        )
        return

    _warn_if_fallback(result)

    if not devices:
        console.print("[yellow]No GPUs found matching criteria[/]")
        return

    table = Table(title=f"GPUs ({len(devices)} of {total})")
    table.add_column("Name")
    table.add_column("Vendor")
    table.add_column("VRAM", justify="right")
    table.add_column("Unified")
    table.add_column("Launch")

    for device in devices:
        table.add_row(
            device.name,
            device.vendor or "-",
            f"{device.vram_gb:g}GB",
            "yes" if device.is_unified_memory else "",
            device.launch_date or "",
        )

    console.print(table)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
def quantizations(as_json: bool):
    """List supported quantization formats."""
    specs = list_quantizations()

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "tag": spec.quantization.value,
                        "bytes_per_parameter": spec.bytes_per_parameter,
                        "label": spec.label,
                        "description": spec.description,
                    }
                    for spec in specs
                ],
                indent=2,
            )
        )
        return

    table = Table(title="Quantization Formats")
    table.add_column("Tag")
    table.add_column("Bytes/param", justify="right")
    table.add_column("Label")
    table.add_column("Description")

    for spec in specs:
        table.add_row(
            spec.quantization.value,
            f"{spec.bytes_per_parameter:g}",
            spec.label,
            spec.description,
        )

    console.print(table)


@cli.command("clear-cache")
@click.pass_context
def clear_cache(ctx):
    """Remove the local GPU catalog cache."""
    cache_dir = ctx.obj.get("cache_dir")
    cache = FileCatalogCache(cache_dir=Path(cache_dir) if cache_dir else None)
    cache.clear()
    console.print(f"[green]Catalog cache cleared[/] ({cache.cache_file})")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
