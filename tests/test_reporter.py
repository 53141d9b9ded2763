import json

import pytest

from coldstart_lab.harness.reporter import ChartReporter, ConsoleReporter, JSONReporter
from coldstart_lab.schemas.definitions import WIDE_SCHEMA

from conftest import make_case, make_cold_result, make_result


def reject_constant(name):
    raise ValueError(f"non-finite value in output: {name}")


def matrix_results():
    return [
        make_result(make_case(model="fast", schema=WIDE_SCHEMA), [120.0, 100.0, 80.0]),
        make_result(make_case(model="flaky", schema=WIDE_SCHEMA), [50.0, None, None]),
        make_result(make_case(model="dead", schema=WIDE_SCHEMA), [None, None]),
    ]


class TestConsoleReporter:

    def test_case_table_values(self):
        report = ConsoleReporter(use_color=False).case_table(matrix_results())

        assert "Comprehensive Report" in report
        assert "fast-non-strict-json (Wide JSON Schema)" in report
        assert "100.0000 ms" in report
        assert "20.0000%" in report
        assert "33.3333%" in report
        assert "N/A" in report

    def test_empty_table(self):
        assert ConsoleReporter(use_color=False).case_table([]) == "No results to display"

    def test_matrix_report_ranks_reliable_first(self):
        report = ConsoleReporter(use_color=False).matrix_report(matrix_results())

        latency_section = report.split("Methods sorted by performance")[1].split("Methods sorted by cost")[0]
        assert latency_section.index("fast-") < latency_section.index("flaky-") < latency_section.index("dead-")
        assert "Report for schema: Wide JSON Schema" in report
        assert "First-Call Penalty Summary" in report

    def test_no_ansi_codes_without_color(self):
        report = ConsoleReporter(use_color=False).matrix_report(matrix_results())
        assert "\033[" not in report

    def test_success_rate_coloured_by_reliability(self):
        reporter = ConsoleReporter(use_color=True)

        assert reporter.format_success_rate(90.0) == "\033[92m90.0000%\033[0m"
        assert reporter.format_success_rate(10.0).startswith("\033[91m")
        assert reporter.format_success_rate(None) == "N/A"

    def test_cold_start_report(self):
        results = [
            make_cold_result(make_case(model="gpt-4o-mini"), [(100.0, 70.0), (140.0, 90.0)]),
            make_cold_result(make_case(model="gpt-4o", schema=WIDE_SCHEMA), [None]),
        ]

        report = ConsoleReporter(use_color=False).cold_start_report(results)

        assert "Comprehensive Cold Start Report" in report
        assert "120.0000 ms" in report
        assert "80.0000 ms" in report
        assert "Model: gpt-4o-mini\n  Average Cold Start Penalty: 50.0000%" in report
        assert "Model: gpt-4o\n  Average Cold Start Penalty: N/A" in report
        assert "Overall Average Cold Start Penalty: 50.0000%" in report


class TestJSONReporter:

    def test_matrix_round_trip(self, tmp_path):
        reporter = JSONReporter(tmp_path)

        path = reporter.save_matrix(matrix_results(), {"num_runs": 3})
        data = json.loads(path.read_text())

        assert path.parent == tmp_path
        assert path.name.startswith("matrix_")
        assert data["config"] == {"num_runs": 3}
        assert len(data["results"]) == 3
        assert data["results"][2]["stats"]["avg_ms"] is None
        assert data["leaderboards"][0]["by_latency"][-1].startswith("dead-")
        assert data["penalty_summary"]["by_model"]["fast"] == pytest.approx(20.0)

    def test_cold_start_file_is_strict_json(self, tmp_path):
        path = JSONReporter(tmp_path).save_cold_start([make_cold_result(make_case(), [None])])

        data = json.loads(path.read_text(), parse_constant=reject_constant)
        assert data["name"] == "cold_start"
        assert data["results"][0]["stats"]["cold_start_penalty"] is None


class TestChartReporter:

    def test_latency_chart_written(self, tmp_path):
        path = ChartReporter(tmp_path).latency_bar_chart(matrix_results())

        assert path == tmp_path / "matrix_latency.png"
        assert path.exists()

    def test_cold_start_chart_skips_when_nothing_to_plot(self, tmp_path):
        chart = ChartReporter(tmp_path).cold_start_chart([make_cold_result(make_case(), [None])])
        assert chart is None

    def test_cold_start_chart_written(self, tmp_path):
        results = [make_cold_result(make_case(), [(120.0, 80.0), (120.0, 80.0)])]

        path = ChartReporter(tmp_path).cold_start_chart(results)

        assert path == tmp_path / "cold_start.png"
        assert path.exists()
