"""
Results reporting for benchmark runs.

Provides CLI tables, leaderboards, penalty summaries, charts and JSON export.
Durations and percentages are always rendered with four decimals; values
that could not be computed are shown as N/A.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from .aggregate import (
    Leaderboard,
    PenaltySummary,
    fmt_cost,
    fmt_ms,
    fmt_pct,
    leaderboards,
    summarize_penalties,
)
from .results import CaseResult, ColdStartResult


class ConsoleReporter:
    """Generates console/CLI reports."""

    def __init__(self, use_color: bool = True):
        self.use_color = use_color

    def _color(self, text: str, color: str) -> str:
        """Apply ANSI color if enabled."""
        if not self.use_color:
            return text

        colors = {
            "green": "\033[92m",
            "red": "\033[91m",
            "yellow": "\033[93m",
            "blue": "\033[94m",
            "bold": "\033[1m",
            "reset": "\033[0m",
        }

        return f"{colors.get(color, '')}{text}{colors['reset']}"

    def _header(self, title: str, width: int = 70) -> list[str]:
        return [
            self._color(f"\n{'=' * width}", "blue"),
            self._color(title, "bold"),
            self._color(f"{'=' * width}", "blue"),
        ]

    def format_success_rate(self, rate: Optional[float]) -> str:
        """Success rate coloured by reliability."""
        text = fmt_pct(rate)
        if rate is None:
            return text
        if rate >= 80:
            return self._color(text, "green")
        return self._color(text, "red")

    def case_table(self, results: Iterable[CaseResult]) -> str:
        """Table of every matrix case."""
        results = list(results)
        if not results:
            return "No results to display"

        headers = ["Case", "Avg", "First call", "Penalty", "Success", "Cost"]
        col_widths = [62, 16, 16, 14, 12, 10]

        lines = self._header("Comprehensive Report", sum(col_widths))
        header_row = "".join(f"{h:<{col_widths[i]}}" for i, h in enumerate(headers))
        lines.append(self._color(header_row, "bold"))
        lines.append("-" * sum(col_widths))

        for result in results:
            stats = result.stats
            label = result.key.label
            name = label[:59] + "..." if len(label) > 62 else label
            row = [
                f"{name:<{col_widths[0]}}",
                f"{fmt_ms(stats.avg_ms):<{col_widths[1]}}",
                f"{fmt_ms(stats.first_ms):<{col_widths[2]}}",
                f"{fmt_pct(stats.cold_start_penalty):<{col_widths[3]}}",
                f"{fmt_pct(stats.success_rate):<{col_widths[4]}}",
                f"{fmt_cost(stats.total_cost):<{col_widths[5]}}",
            ]
            lines.append("".join(row))

        return "\n".join(lines)

    def leaderboard(self, board: Leaderboard) -> str:
        """Latency and cost rankings for one schema."""
        lines = [self._color(f"\nReport for schema: {board.schema_name}", "bold")]

        lines.append("\nMethods sorted by performance (fastest to slowest):")
        for index, result in enumerate(board.by_latency):
            stats = result.stats
            lines.append(f"{index + 1}. {result.key}")
            lines.append(f"   Average time: {fmt_ms(stats.avg_ms)}")
            lines.append(f"   Success rate: {self.format_success_rate(stats.success_rate)}")
            lines.append(f"   Cost: {fmt_cost(stats.total_cost)}")

        lines.append("\nMethods sorted by cost (cheapest to most expensive):")
        for index, result in enumerate(board.by_cost):
            stats = result.stats
            lines.append(f"{index + 1}. {result.key}")
            lines.append(f"   Cost: {fmt_cost(stats.total_cost)}")
            lines.append(f"   Average time: {fmt_ms(stats.avg_ms)}")
            lines.append(f"   Success rate: {self.format_success_rate(stats.success_rate)}")

        return "\n".join(lines)

    def matrix_report(self, results: Iterable[CaseResult]) -> str:
        """Full report for a matrix run: table plus per-schema leaderboards."""
        results = list(results)
        parts = [self.case_table(results)]
        parts.extend(self.leaderboard(board) for board in leaderboards(results))
        parts.append(self.penalty_summary(summarize_penalties(results), "First-Call Penalty Summary"))
        return "\n".join(parts)

    def cold_start_table(self, results: Iterable[ColdStartResult]) -> str:
        """Table of every cold-start case."""
        results = list(results)
        if not results:
            return "No results to display"

        headers = ["Model", "Schema", "Avg 1st", "Avg 2nd", "Penalty", "Success"]
        col_widths = [28, 28, 18, 18, 14, 12]

        lines = self._header("Comprehensive Cold Start Report", sum(col_widths))
        header_row = "".join(f"{h:<{col_widths[i]}}" for i, h in enumerate(headers))
        lines.append(self._color(header_row, "bold"))
        lines.append("-" * sum(col_widths))

        for result in results:
            stats = result.stats
            row = [
                f"{result.key.model:<{col_widths[0]}}",
                f"{result.key.schema_name:<{col_widths[1]}}",
                f"{fmt_ms(stats.avg_first_ms):<{col_widths[2]}}",
                f"{fmt_ms(stats.avg_second_ms):<{col_widths[3]}}",
                f"{fmt_pct(stats.cold_start_penalty):<{col_widths[4]}}",
                f"{fmt_pct(stats.success_rate):<{col_widths[5]}}",
            ]
            lines.append("".join(row))

        return "\n".join(lines)

    def penalty_summary(self, summary: PenaltySummary, title: str = "Summary Statistics") -> str:
        """Average cold-start penalty per model, per schema and overall."""
        lines = [self._color(f"\n{title}:", "bold")]

        for model, penalty in summary.by_model.items():
            lines.append(f"\nModel: {model}")
            lines.append(f"  Average Cold Start Penalty: {fmt_pct(penalty)}")

        for schema, penalty in summary.by_schema.items():
            lines.append(f"\nSchema: {schema}")
            lines.append(f"  Average Cold Start Penalty: {fmt_pct(penalty)}")

        overall = self._color(fmt_pct(summary.overall), "yellow")
        lines.append(f"\nOverall Average Cold Start Penalty: {overall}")
        return "\n".join(lines)

    def cold_start_report(self, results: Iterable[ColdStartResult]) -> str:
        """Full report for a cold-start run."""
        results = list(results)
        return "\n".join([
            self.cold_start_table(results),
            self.penalty_summary(summarize_penalties(results)),
        ])


class ChartReporter:
    """Generates visual charts using matplotlib."""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = output_dir or Path("results/charts")
        self._matplotlib_available = False
        self._check_matplotlib()

    def _check_matplotlib(self):
        """Check if matplotlib is available."""
        try:
            import matplotlib
            matplotlib.use("Agg")  # Non-interactive backend
            self._matplotlib_available = True
        except ImportError:
            self._matplotlib_available = False

    def latency_bar_chart(
        self,
        results: Iterable[CaseResult],
        filename: Optional[str] = None,
    ) -> Optional[Path]:
        """Bar chart of average latency per matrix case."""
        if not self._matplotlib_available:
            print("Warning: matplotlib not available for charts")
            return None

        import matplotlib.pyplot as plt
        import numpy as np

        plotted = [r for r in results if r.stats.avg_ms is not None]
        if not plotted:
            return None

        names = [r.key.label for r in plotted]
        averages = [r.stats.avg_ms for r in plotted]
        colors = ["steelblue" if r.stats.reliable else "coral" for r in plotted]

        x = np.arange(len(names))
        fig, ax = plt.subplots(figsize=(max(10, len(names) * 0.6), 6))
        ax.bar(x, averages, color=colors)

        ax.set_xlabel("Case")
        ax.set_ylabel("Average latency (ms)")
        ax.set_title("Average Latency per Case (coral: success rate < 80%)")
        ax.set_xticks(x)
        ax.set_xticklabels(names, rotation=60, ha="right", fontsize=7)

        fig.tight_layout()
        return self._save(fig, plt, filename or "matrix_latency.png")

    def cold_start_chart(
        self,
        results: Iterable[ColdStartResult],
        filename: Optional[str] = None,
    ) -> Optional[Path]:
        """Grouped bar chart of average cold and warm latency per case.

        Each group is labelled with its cold-start penalty.
        """
        if not self._matplotlib_available:
            print("Warning: matplotlib not available for charts")
            return None

        import matplotlib.pyplot as plt
        import numpy as np

        plotted = [r for r in results if r.stats.cold_start_penalty is not None]
        if not plotted:
            return None

        names = [f"{r.key.model}\n{r.key.schema_name}" for r in plotted]
        firsts = [r.stats.avg_first_ms for r in plotted]
        seconds = [r.stats.avg_second_ms for r in plotted]

        x = np.arange(len(names))
        width = 0.35

        fig, ax = plt.subplots(figsize=(12, 6))
        ax.bar(x - width / 2, firsts, width, label="1st (cold)", color="coral")
        ax.bar(x + width / 2, seconds, width, label="2nd (warm)", color="steelblue")
        for i, result in enumerate(plotted):
            ax.annotate(
                fmt_pct(result.stats.cold_start_penalty),
                (x[i], max(firsts[i], seconds[i])),
                ha="center",
                va="bottom",
                fontsize=8,
            )

        ax.set_xlabel("Case")
        ax.set_ylabel("Latency (ms)")
        ax.set_title("Cold vs Warm Request Latency")
        ax.set_xticks(x)
        ax.set_xticklabels(names, rotation=45, ha="right", fontsize=8)
        ax.legend()

        fig.tight_layout()
        return self._save(fig, plt, filename or "cold_start.png")

    def _save(self, fig, plt, filename: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.output_dir / filename
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        plt.close(fig)
        return filepath


class JSONReporter:
    """Exports results as JSON for further analysis."""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = output_dir or Path("results")

    def _write(self, name: str, data: dict) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.output_dir / f"{name}_{timestamp}.json"

        with open(filepath, "w") as f:
            json.dump({"name": name, "timestamp": timestamp, **data}, f, indent=2)

        return filepath

    def save_matrix(
        self,
        results: Iterable[CaseResult],
        config: Optional[dict] = None,
        name: str = "matrix",
    ) -> Path:
        """Save matrix results, leaderboards and the penalty summary."""
        results = list(results)
        return self._write(name, {
            "config": config or {},
            "results": [r.to_dict() for r in results],
            "leaderboards": [b.to_dict() for b in leaderboards(results)],
            "penalty_summary": summarize_penalties(results).to_dict(),
        })

    def save_cold_start(
        self,
        results: Iterable[ColdStartResult],
        config: Optional[dict] = None,
        name: str = "cold_start",
    ) -> Path:
        """Save cold-start results and the penalty summary."""
        results = list(results)
        return self._write(name, {
            "config": config or {},
            "results": [r.to_dict() for r in results],
            "penalty_summary": summarize_penalties(results).to_dict(),
        })
