from __future__ import annotations
import json
from pathlib import Path
from typing import Dict, Any
from ..config import SimConfig
from ..core.stats import Statistics
from . import viz


def format_summary(stats: Statistics) -> str:
    return f"hits:{stats.hits} misses:{stats.misses} evictions:{stats.evictions}"


def print_summary(stats: Statistics, results_file: str | None = ".csim_results"):
    """Prints the summary line and writes "hits misses evictions" to the results file."""
    print(format_summary(stats))
    if results_file:
        with open(results_file, "w") as f:
            f.write(f"{stats.hits} {stats.misses} {stats.evictions}\n")


def generate_report_json(stats: Statistics, config: SimConfig) -> Dict[str, Any]:
    """Generates a JSON-compatible dictionary from the run statistics."""
    geometry = config.geometry()
    report_data = {
        "geometry": {
            "s": geometry.set_index_bits,
            "E": geometry.lines_per_set,
            "b": geometry.offset_bits,
            "sets": geometry.set_count,
            "block_size": geometry.block_size,
            "capacity_bytes": geometry.capacity_bytes,
        },
        "trace_file": config.trace_file,
        "sets": stats.per_set_rows(),
    }
    report_data.update(stats.to_dict())
    return report_data


def generate_report(stats: Statistics, config: SimConfig):
    """Generates all report artifacts."""
    report_data = generate_report_json(stats, config)
    output_dir = Path(config.report_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / "report.json", "w") as f:
        json.dump(report_data, f, indent=4)

    viz.export_set_chart(report_data['sets'], str(output_dir / "report.html"))

    print(viz.export_set_chart_ascii(report_data['sets']))

    print(f"\nReports generated in {output_dir.absolute()}")
    print(f"Hit rate: {report_data['hit_rate']:.2%}  Miss rate: {report_data['miss_rate']:.2%}")
