"""Tests for the progress report PDF."""

from datetime import datetime

from metabalance.tracking.pdf_report import ProgressReport, WeightEntry, render_progress_pdf


class TestRenderProgressPdf:
    def test_empty_report(self):
        pdf = render_progress_pdf(ProgressReport(user_name="Alex", current_weight=0, target_weight=0))
        assert pdf.startswith(b"%PDF")

    def test_full_report(self):
        report = ProgressReport(
            user_name="Alex <admin>",
            current_weight=240,
            target_weight=200,
            weight_logs=[WeightEntry(datetime(2026, 3, d), 250 - d) for d in range(1, 15)],
            avg_calories=1850.5,
            avg_protein=140.2,
            avg_carbs=150,
            avg_fats=70.5,
            current_streak=4,
            longest_streak=9,
            total_days=14,
            avg_stars=3.6,
            perfect_days=2,
        )
        pdf = render_progress_pdf(report)
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000
