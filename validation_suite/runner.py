"""Batch validation runner for medical Q&A answer-quality regression checks."""

from __future__ import annotations

import argparse
import csv
import html
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from medrag.qa.config import PipelineSettings
from medrag.qa.orchestrator import AnswerPipeline
from medrag.qa.seed_data import build_seeded_stores
from medrag.qa.stores import InMemorySessionStore
from validation_suite.config import THRESHOLDS
from validation_suite.dataset_loader import load_cases, load_corpus
from validation_suite.metrics.answer_quality import citation_summary, compute_term_recall, compute_type_coverage

logger = logging.getLogger(__name__)

_FIELDNAMES = [
    "case_id",
    "question",
    "data_quality",
    "entities_found",
    "documents_found",
    "citations",
    "term_recall",
    "type_coverage",
    "processing_time_ms",
    "passed",
]


def build_pipeline(corpus_path: str | None = None) -> AnswerPipeline:
    if corpus_path:
        graph_store, document_store = load_corpus(corpus_path)
    else:
        graph_store, document_store = build_seeded_stores()
    return AnswerPipeline(graph_store, document_store, InMemorySessionStore(), settings=PipelineSettings.from_env())


def evaluate_case(pipeline: AnswerPipeline, case: dict) -> dict:
    """Answer one case and score it against its expectations."""

    response = pipeline.answer(case["question"])
    citations = [c.model_dump(mode="json") for c in response.citations]
    sub_query_types = [m.sub_queries for m in pipeline.history(response.session_id) if m.sub_queries]
    produced_types = [sq.type.value for group in sub_query_types for sq in group]

    term_recall = compute_term_recall(response.answer, case["expected_terms"])
    type_coverage = compute_type_coverage(produced_types, case["expected_types"])
    cited = citation_summary(citations)

    passed = (
        term_recall >= THRESHOLDS.min_term_recall
        and type_coverage >= THRESHOLDS.min_type_coverage
        and bool(cited["cited"])
    )
    if not passed:
        logger.warning(
            "Validation case failed | case=%s term_recall=%.2f type_coverage=%.2f citations=%d",
            case["case_id"],
            term_recall,
            type_coverage,
            cited["citations"],
        )
    return {
        "case_id": case["case_id"],
        "question": case["question"],
        "data_quality": response.metadata.data_quality.value,
        "entities_found": response.metadata.entities_found,
        "documents_found": response.metadata.documents_found,
        "citations": cited["citations"],
        "term_recall": round(term_recall, 3),
        "type_coverage": round(type_coverage, 3),
        "processing_time_ms": response.metadata.processing_time_ms,
        "passed": passed,
    }


def _write_csv(output_path: Path, rows: list[dict]) -> None:
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=_FIELDNAMES)
        writer.writeheader()
        writer.writerows(rows)


def _write_html_report(output_path: Path, rows: list[dict], pass_rate: float, cited_rate: float) -> None:
    table_rows = "\n".join(
        (
            f"<tr><td>{html.escape(str(row['case_id']))}</td>"
            f"<td>{html.escape(row['question'])}</td>"
            f"<td>{row['data_quality']}</td>"
            f"<td>{row['entities_found']}</td>"
            f"<td>{row['documents_found']}</td>"
            f"<td>{row['citations']}</td>"
            f"<td>{row['term_recall']:.2f}</td>"
            f"<td>{row['type_coverage']:.2f}</td>"
            f"<td>{'PASS' if row['passed'] else 'FAIL'}</td></tr>"
        )
        for row in rows
    )

    output_path.write_text(
        """<!doctype html>
<html>
<head><meta charset=\"utf-8\"><title>Medical Q&amp;A Validation Report</title></head>
<body>
<h1>Medical Q&amp;A Validation Report</h1>
<p>Thresholds: min term recall = {min_recall:.2f}, min type coverage = {min_coverage:.2f}, min cited rate = {min_cited:.0%}</p>
<p>Overall pass rate: {pass_rate:.2%} | cited rate: {cited_rate:.2%}</p>
<table border=\"1\" cellpadding=\"6\" cellspacing=\"0\">
<thead><tr><th>Case</th><th>Question</th><th>Data Quality</th><th>Entities</th><th>Documents</th><th>Citations</th><th>Term Recall</th><th>Type Coverage</th><th>Status</th></tr></thead>
<tbody>
{rows}
</tbody>
</table>
</body>
</html>
""".format(
            min_recall=THRESHOLDS.min_term_recall,
            min_coverage=THRESHOLDS.min_type_coverage,
            min_cited=THRESHOLDS.min_cited_rate,
            pass_rate=pass_rate,
            cited_rate=cited_rate,
            rows=table_rows,
        ),
        encoding="utf-8",
    )


def run_validation(cases_path: str, corpus_path: str | None = None, output_dir: str = ".") -> int:
    cases = load_cases(cases_path)
    pipeline = build_pipeline(corpus_path)

    results = [evaluate_case(pipeline, case) for case in cases]

    case_count = len(results)
    cited_rate = sum(1 for row in results if row["citations"]) / case_count if case_count else 0.0
    pass_rate = sum(1 for row in results if row["passed"]) / case_count if case_count else 0.0

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    csv_path = out_dir / "validation_summary.csv"
    html_path = out_dir / "validation_report.html"

    _write_csv(csv_path, results)
    _write_html_report(html_path, results, pass_rate, cited_rate)

    print(f"[MEDRAG][VALIDATION] Completed | cases={case_count} pass_rate={pass_rate:.2%}")
    print(json.dumps({"csv": str(csv_path), "html": str(html_path)}, indent=2))

    if cited_rate < THRESHOLDS.min_cited_rate:
        return 1

    if any(not row["passed"] for row in results):
        return 1
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="medrag-validate")
    parser.add_argument("--validate", dest="validate", help="Path to a question case file or directory")
    parser.add_argument("--corpus", dest="corpus", help="JSON corpus to evaluate against (default: sample corpus)")
    parser.add_argument("--output-dir", dest="output_dir", default="validation_suite/reports")
    return parser


def main() -> int:
    load_dotenv()
    logging.basicConfig(level=logging.WARNING)
    parser = _build_parser()
    args = parser.parse_args()

    if args.validate:
        return run_validation(args.validate, corpus_path=args.corpus, output_dir=args.output_dir)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
