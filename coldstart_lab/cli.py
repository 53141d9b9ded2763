"""
Schema Cold-Start Lab - command line entry point.

Usage:
    python main.py [command] [options]

Commands:
    cases       - List the benchmark cases that would run
    matrix      - Run the model x schema x mode x structured-output matrix
    coldstart   - Run the cold vs warm request benchmark
    all         - Run the matrix and the cold-start benchmark
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from .harness.cases import generate_cases, select_models, select_schemas
from .harness.reporter import ConsoleReporter
from .harness.runner import BenchmarkConfig
from .instrumentation.generators import PROVIDERS, get_generator
from .instrumentation.traces import TracingConfig, init_tracing, shutdown_tracing
from .schemas.definitions import list_schemas
from .schemas.mutation import CACHE_BUSTERS


def _config(args, name: str) -> BenchmarkConfig:
    overrides = {
        "num_runs": args.runs,
        "cold_start_runs": args.cold_runs,
        "max_concurrency": args.concurrency,
        "timeout_seconds": args.timeout,
    }
    return BenchmarkConfig(
        name=name,
        cache_buster=args.cache_buster,
        verbose=not args.quiet,
        metadata={"provider": args.provider},
        **{k: v for k, v in overrides.items() if v is not None},
    )


def _suite_kwargs(args, name: str) -> dict:
    return {
        "generator": get_generator(args.provider),
        "models": select_models(args.models, provider=args.provider),
        "schemas": select_schemas(args.schemas),
        "config": _config(args, name),
        "tracer": args.tracer,
        "reporter": ConsoleReporter(use_color=not args.no_color),
        "output_dir": args.output_dir,
        "charts": args.charts,
    }


async def list_cases(args):
    """Print the generated case matrix without calling any API."""
    models = select_models(args.models, provider=args.provider)
    schemas = select_schemas(args.schemas)
    cases = generate_cases(models, schemas)

    print(f"{len(cases)} cases:")
    for index, case in enumerate(cases):
        print(f"  {index + 1}. {case.key}")


async def run_matrix_benchmarks(args):
    """Run the matrix benchmark."""
    from .benchmarks.matrix import MatrixBenchmarkSuite

    suite = MatrixBenchmarkSuite(**_suite_kwargs(args, "matrix"))
    await suite.run_all()


async def run_cold_start_benchmarks(args):
    """Run the cold-start benchmark."""
    from .benchmarks.cold_start import ColdStartBenchmarkSuite

    suite = ColdStartBenchmarkSuite(**_suite_kwargs(args, "cold_start"))
    await suite.run_all()


async def run_all_benchmarks(args):
    """Run all benchmark suites."""
    print("=" * 70)
    print("SCHEMA COLD-START LAB - FULL BENCHMARK SUITE")
    print("=" * 70)

    print("\n[1/2] MATRIX BENCHMARK")
    await run_matrix_benchmarks(args)

    print("\n[2/2] COLD START BENCHMARK")
    await run_cold_start_benchmarks(args)

    print("\n" + "=" * 70)
    print("ALL BENCHMARKS COMPLETE")
    print("=" * 70)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Schema Cold-Start Lab - Benchmark structured output latency",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py cases
    python main.py matrix --runs 10 --concurrency 8
    python main.py coldstart --models gpt-4o-mini --schemas wide complex
    python main.py all --provider anthropic --output-dir results --charts
        """,
    )

    parser.add_argument(
        "command",
        choices=["cases", "matrix", "coldstart", "all"],
        help="Benchmark suite to run",
    )
    parser.add_argument(
        "--provider",
        choices=list(PROVIDERS),
        default="openai",
        help="Generation API to benchmark (default: openai)",
    )
    parser.add_argument(
        "--models",
        nargs="+",
        help="Model presets to include (default: all presets for the provider)",
    )
    parser.add_argument(
        "--schemas",
        nargs="+",
        help=f"Schemas to include by key: {', '.join(list_schemas())} (default: all)",
    )
    parser.add_argument(
        "--runs",
        type=int,
        help="Trials per matrix case (default: $COLDSTART_RUNS or 50)",
    )
    parser.add_argument(
        "--cold-runs",
        type=int,
        help="Cold/warm pairs per cold-start case (default: $COLDSTART_COLD_RUNS or 25)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Maximum in-flight API calls (default: $COLDSTART_CONCURRENCY or 5)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Deadline per API call in seconds (default: $COLDSTART_TIMEOUT or 120)",
    )
    parser.add_argument(
        "--cache-buster",
        choices=list(CACHE_BUSTERS),
        default="unique-field",
        help="Schema mutation used to force cold requests (default: unique-field)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory to save JSON results (default: don't save)",
    )
    parser.add_argument(
        "--charts",
        action="store_true",
        help="Also save matplotlib charts to <output-dir>/charts",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Trace API calls with OpenTelemetry and Langfuse (LANGFUSE_* env vars)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only print the final reports",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colours in reports",
    )
    return parser


def main(argv=None) -> int:
    # Load environment variables from .env file
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.output_dir is not None:
        args.output_dir.mkdir(parents=True, exist_ok=True)
    elif args.charts:
        parser.error("--charts requires --output-dir")

    args.tracer = init_tracing(TracingConfig(enable_langfuse=True)) if args.trace else None

    # Map commands to functions
    commands = {
        "cases": list_cases,
        "matrix": run_matrix_benchmarks,
        "coldstart": run_cold_start_benchmarks,
        "all": run_all_benchmarks,
    }

    try:
        asyncio.run(commands[args.command](args))
    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        return 1
    finally:
        if args.tracer is not None:
            shutdown_tracing()

    return 0


if __name__ == "__main__":
    sys.exit(main())
