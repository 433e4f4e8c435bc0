from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import load_config
from .report.charts import ChartRenderer
from .report.errors import ReportGenerationError
from .report.pdf_builder import build_report_pdf
from .report.report_data import ReportData
from .report.resources import load_resources
from .report.variants import VARIANTS, get_variant
from .worker_pool import WorkerPool


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a material test PDF report from JSON")
    parser.add_argument(
        "input",
        type=Path,
        help="Input JSON with testInfo, calculatedProperties and graphSpecs/graphData",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output PDF path (default: <input_stem>_report.pdf)",
    )
    parser.add_argument(
        "--variant",
        choices=sorted(VARIANTS),
        default=None,
        help="Layout variant (default: report.variant from config)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to config YAML")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    load_dotenv()
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    if not args.input.exists():
        print(f"Error: input file not found: {args.input}", file=sys.stderr)
        return 1
    try:
        payload = json.loads(args.input.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        print(f"Error: input file contains invalid JSON: {exc}", file=sys.stderr)
        return 1
    if not isinstance(payload, dict):
        print("Error: input JSON must be an object", file=sys.stderr)
        return 1
    # API request bodies wrap the data as {"reportData": ..., "graphSpecs": ...}
    report_payload = payload.get("reportData", payload)
    report = ReportData.from_dict(report_payload, graph_specs=payload.get("graphSpecs"))

    try:
        config = load_config(args.config)
        variant = get_variant(args.variant or config.report.variant)
        resources = load_resources(config.report)
    except (ValueError, ReportGenerationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    pool = WorkerPool(max_workers=config.charts.max_workers)
    renderer = ChartRenderer(
        pool,
        width_px=config.charts.width_px,
        height_px=config.charts.height_px,
        dpi=config.charts.dpi,
        timeout_s=config.charts.timeout_s,
    )
    out_pdf = args.output or args.input.with_name(f"{args.input.stem}_report.pdf")
    try:
        pdf_bytes = build_report_pdf(
            report, resources=resources, chart_renderer=renderer, variant=variant
        )
    except ReportGenerationError as exc:
        print(f"Error: PDF generation failed: {exc}", file=sys.stderr)
        return 1
    finally:
        pool.shutdown(wait=False)
    out_pdf.parent.mkdir(parents=True, exist_ok=True)
    out_pdf.write_bytes(pdf_bytes)
    print(f"wrote report: {out_pdf}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
