"""Progress report PDF (reportlab platypus)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from metabalance.tracking.features import round_half_up

BRAND_COLOR = colors.HexColor("#14b8a6")
MAX_WEIGHT_ROWS = 10

DISCLAIMER = (
    "This report is for informational purposes only and does not constitute medical advice. "
    "Consult with a healthcare professional before making significant changes to your diet "
    "or exercise routine."
)


@dataclass
class WeightEntry:
    logged_at: datetime
    weight: float


@dataclass
class ProgressReport:
    user_name: str
    current_weight: float
    target_weight: float
    weight_logs: list[WeightEntry] = field(default_factory=list)  # oldest first
    avg_calories: float = 0.0
    avg_protein: float = 0.0
    avg_carbs: float = 0.0
    avg_fats: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    total_days: int = 0
    avg_stars: float = 0.0
    perfect_days: int = 0
    generated_at: datetime = field(default_factory=datetime.now)


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("MBTitle", parent=base["Title"], textColor=BRAND_COLOR, fontSize=24, leading=28),
        "subtitle": ParagraphStyle(
            "MBSubtitle", parent=base["Normal"], alignment=TA_CENTER, textColor=colors.HexColor("#666666")
        ),
        "heading": ParagraphStyle(
            "MBHeading", parent=base["Heading2"], textColor=BRAND_COLOR, spaceBefore=12, spaceAfter=6
        ),
        "body": base["BodyText"],
        "small": ParagraphStyle(
            "MBSmall", parent=base["Normal"], fontSize=8, leading=10, alignment=TA_CENTER, textColor=colors.grey
        ),
    }


def _weight_section(report: ProgressReport, s: dict[str, ParagraphStyle]) -> list:
    to_go = report.current_weight - report.target_weight
    progress = report.current_weight - report.weight_logs[0].weight if report.weight_logs else 0.0
    direction = "lost" if progress < 0 else "gained"
    return [
        Paragraph("Weight Progress", s["heading"]),
        Paragraph(f"Current Weight: {report.current_weight:g} lbs", s["body"]),
        Paragraph(f"Target Weight: {report.target_weight:g} lbs", s["body"]),
        Paragraph(f"Weight to Go: {to_go:.1f} lbs", s["body"]),
        Paragraph(f"Total Progress: {abs(progress):.1f} lbs {direction}", s["body"]),
    ]


def _engagement_section(report: ProgressReport, s: dict[str, ParagraphStyle]) -> list:
    return [
        Paragraph("Engagement &amp; Consistency", s["heading"]),
        Paragraph(f"Current Streak: {report.current_streak} days", s["body"]),
        Paragraph(f"Longest Streak: {report.longest_streak} days", s["body"]),
        Paragraph(f"Total Days Tracked: {report.total_days}", s["body"]),
        Paragraph(f"Average Daily Stars: {report.avg_stars:.1f} / 5.0", s["body"]),
        Paragraph(f"Perfect Days (5 stars): {report.perfect_days}", s["body"]),
    ]


def _nutrition_section(report: ProgressReport, s: dict[str, ParagraphStyle]) -> list:
    rows = [
        ["Calories", f"{round_half_up(report.avg_calories)} cal/day"],
        ["Protein", f"{round_half_up(report.avg_protein)} g/day"],
        ["Carbs", f"{round_half_up(report.avg_carbs)} g/day"],
        ["Fats", f"{round_half_up(report.avg_fats)} g/day"],
    ]
    table = Table(rows, colWidths=[5 * cm, 5 * cm])
    table.setStyle(TableStyle([("FONTSIZE", (0, 0), (-1, -1), 10), ("BOTTOMPADDING", (0, 0), (-1, -1), 4)]))
    return [Paragraph("Nutrition Summary (7-Day Average)", s["heading"]), table]


def _weight_log_section(report: ProgressReport, s: dict[str, ParagraphStyle]) -> list:
    if not report.weight_logs:
        return []
    recent = list(reversed(report.weight_logs[-MAX_WEIGHT_ROWS:]))
    rows = [["Date", "Weight"]] + [[e.logged_at.strftime("%Y-%m-%d"), f"{e.weight:g} lbs"] for e in recent]
    table = Table(rows, colWidths=[5 * cm, 5 * cm])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ]
        )
    )
    return [Paragraph("Recent Weight Entries", s["heading"]), table]


def render_progress_pdf(report: ProgressReport) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=2 * cm,
        leftMargin=2 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
        title="MetaBalance Progress Report",
    )
    s = _styles()

    story: list = [
        Paragraph("MetaBalance", s["title"]),
        Paragraph("Your Metabolic Health Journey", s["subtitle"]),
        Spacer(1, 18),
        Paragraph(f"Progress Report for {escape(report.user_name)}", s["heading"]),
    ]
    story.extend(_weight_section(report, s))
    story.extend(_engagement_section(report, s))
    story.extend(_nutrition_section(report, s))
    story.extend(_weight_log_section(report, s))
    story.append(Spacer(1, 24))
    stamp = report.generated_at.strftime("%Y-%m-%d at %H:%M")
    story.append(Paragraph(f"Generated on {stamp}", s["small"]))
    story.append(Paragraph(DISCLAIMER, s["small"]))

    doc.build(story)
    pdf_content = buffer.getvalue()
    buffer.close()
    return pdf_content
