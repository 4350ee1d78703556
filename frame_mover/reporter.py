"""Reporting for completed frame mover runs."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .models import ErrorOutcome, Moved, RunResult

logger = logging.getLogger(__name__)

MAX_LISTED_ERRORS = 20


class RunReporter:
    """Generates summaries and saved reports for a run."""

    def generate_summary_report(self, result: RunResult) -> str:
        """
        Generate human-readable summary report.

        Args:
            result: Result of a finished or cancelled run

        Returns:
            Formatted summary report
        """
        stats = result.snapshot

        report = []
        report.append("=" * 50)
        report.append("FRAME MOVER SUMMARY REPORT")
        report.append("=" * 50)
        report.append(f"Mode: {'DRY RUN' if result.dry_run else 'LIVE RUN'}")
        report.append(f"Source: {result.source}")
        report.append(f"Destination: {result.dest}")
        report.append(f"Suffixes: {', '.join(result.suffixes)}")
        report.append(f"Final phase: {stats.phase.value}")
        report.append("")

        report.append("=== FILE STATISTICS ===")
        report.append(f"• Files scanned: {stats.scanned:,}")
        report.append(f"• Files matched: {stats.matched:,}")
        verb = "Would move" if result.dry_run else "Moved"
        report.append(f"• {verb}: {stats.moved:,}")
        report.append(f"• Duplicates skipped: {stats.skipped_duplicates:,}")
        report.append(f"• Errors: {stats.errors:,}")
        report.append("")

        renamed = self._renamed(result)
        if renamed:
            report.append("=== RENAMED ON COLLISION ===")
            for line in renamed:
                report.append(f"• {line}")
            report.append("")

        errors = [(path, outcome) for path, outcome in result.outcomes
                  if isinstance(outcome, ErrorOutcome)]
        if errors:
            report.append("=== ERRORS ENCOUNTERED ===")
            for path, outcome in errors[:MAX_LISTED_ERRORS]:
                report.append(f"❌ {path}: {outcome.message}")
            if len(errors) > MAX_LISTED_ERRORS:
                report.append(f"... and {len(errors) - MAX_LISTED_ERRORS} more errors")
            report.append("")

        if result.cancelled:
            status = "⏹ CANCELLED"
        elif stats.errors == 0:
            status = "✅ COMPLETE SUCCESS"
        else:
            status = "⚠️ COMPLETED WITH ISSUES"
        report.append(f"STATUS: {status}")

        return "\n".join(report)

    def _renamed(self, result: RunResult) -> List[str]:
        lines = []
        for path, outcome in result.outcomes:
            if isinstance(outcome, Moved) and outcome.final_path.name != path.name:
                lines.append(f"{path.name} -> {outcome.final_path.name}")
        return lines

    def save_report(self, result: RunResult, report_file: Optional[str] = None,
                    report_dir: Optional[str] = None) -> str:
        """
        Save a JSON report of the run.

        Args:
            result: Run result
            report_file: Explicit output path (auto-generated if None)
            report_dir: Directory for auto-generated names (cwd if None)

        Returns:
            Path to saved report file
        """
        if report_file is None:
            timestamp = datetime.now().strftime('%Y-%m-%dT%H-%M-%S')
            report_path = Path(report_dir or '.') / f"framemove_report_{timestamp}.json"
        else:
            report_path = Path(report_file)
        report_path.parent.mkdir(parents=True, exist_ok=True)

        data = result.to_dict()
        data['created'] = datetime.now().isoformat()

        try:
            with open(report_path, 'w') as f:
                json.dump(data, f, indent=2)
            logger.info(f"Report saved: {report_path}")
            return str(report_path)
        except Exception as e:
            logger.error(f"Failed to save report: {e}")
            raise
