from __future__ import annotations  # Styled PDF rendering for interview reports

from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from interview_setup import InterviewConfig

from .models import InterviewReport, QAPair

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background

SCORE_BANDS = ((85, "Excellent"), (70, "Good"), (50, "Average"))


def score_band(score: int) -> str:
    """Label shown next to a score: Excellent, Good, Average or Needs Improvement."""
    for threshold, label in SCORE_BANDS:
        if score >= threshold:
            return label
    return "Needs Improvement"


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class ReportPDF(FPDF):  # PDF with banner header and paginated footer
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Interview Report"

    @staticmethod
    def _prepare_text(text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        cleaned = value.replace("•", "-").replace("–", "-").replace("—", "-")
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def cell(self, w=None, h=None, text="", *args, **kwargs):  # Sanitise before drawing
        return super().cell(w, h, self._prepare_text(text), *args, **kwargs)

    def multi_cell(self, w, h=None, text="", *args, **kwargs):  # Sanitise before drawing
        return super().multi_cell(w, h, self._prepare_text(text), *args, **kwargs)

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, 20, style="F")
            self.set_text_color(255, 255, 255)
            self.set_font("Helvetica", "B", 16)
            self.set_xy(self.l_margin, 6)
            self.cell(usable, 8, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_text_color(*TEXT)
            self.set_y(26)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font("Helvetica", "B", 12)
            self.cell(usable, 6, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font("Helvetica", "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(0, 9, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Draw two-column metadata
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(col, line, left[0], new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, right[0], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.set_font("Helvetica", "B", 11)
        pdf.cell(col, line, left[1], new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, right[1], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _score_rows(report: InterviewReport) -> List[Tuple[str, int]]:
    return [
        ("Technical", report.technical_score),
        ("Communication", report.communication_score),
        ("Problem Solving", report.problem_solving_score),
        ("Confidence", report.confidence_score),
    ]


def _render_overall(pdf: ReportPDF, score: int) -> None:  # Highlight box for the overall score
    width = _effective_width(pdf)
    top = pdf.get_y()
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, top, width, 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 4)
    pdf.set_text_color(*MUTED)
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(width / 2, 8, "Overall Score")
    pdf.set_text_color(*ACCENT)
    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(width / 2 - 12, 8, f"{score}/100  {score_band(score)}", align="R")
    pdf.set_y(top + 20)
    pdf.set_text_color(*TEXT)


def _render_score_table(pdf: ReportPDF, rows: Sequence[Tuple[str, int]]) -> None:  # Draw per-dimension scores
    widths = [_effective_width(pdf) * 0.5, _effective_width(pdf) * 0.2, _effective_width(pdf) * 0.3]
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font("Helvetica", "B", 10)
    for width, title in zip(widths, ("Dimension", "Score", "Band")):
        pdf.cell(width, 8, title, align="L", fill=True)
    pdf.ln(8)
    pdf.set_text_color(*TEXT)
    pdf.set_font("Helvetica", "", 10)
    for idx, (name, score) in enumerate(rows):
        fill = idx % 2 == 0
        if fill:
            pdf.set_fill_color(247, 250, 255)
        pdf.set_x(pdf.l_margin)
        pdf.cell(widths[0], 7, name, fill=fill)
        pdf.cell(widths[1], 7, f"{score}%", fill=fill)
        pdf.cell(widths[2], 7, score_band(score), fill=fill)
        pdf.ln(7)
    pdf.ln(2)


def _render_bullets(pdf: ReportPDF, items: Sequence[str], empty: str) -> None:
    pdf.set_font("Helvetica", "", 11)
    if not items:
        pdf.set_text_color(*MUTED)
        pdf.multi_cell(_effective_width(pdf), 6, empty, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
    for item in items:
        pdf.set_x(pdf.l_margin)
        pdf.multi_cell(_effective_width(pdf), 6, f"- {item}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _render_answers(pdf: ReportPDF, answers: Sequence[QAPair]) -> None:  # Q&A transcript section
    if not answers:
        _render_bullets(pdf, [], "No answers recorded for this session.")
        return
    width = _effective_width(pdf)
    for idx, pair in enumerate(answers, start=1):
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*ACCENT)
        pdf.set_font("Helvetica", "B", 10)
        pdf.multi_cell(width, 5.5, f"Q{idx}: {pair.question.strip() or '-'}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(60, 60, 60)
        pdf.set_font("Helvetica", "", 10)
        pdf.multi_cell(width, 5.5, f"A: {pair.answer.strip() or '-'}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_draw_color(*RULE)
        pdf.line(pdf.l_margin, pdf.get_y() + 1, pdf.l_margin + width, pdf.get_y() + 1)
        pdf.ln(3)
    pdf.set_text_color(*TEXT)


def generate_report_pdf(  # Build PDF payload for an interview report
    report: InterviewReport,
    config: InterviewConfig,
    generated_at: Optional[datetime] = None,
) -> bytes:
    pdf = ReportPDF()
    pdf.header_title = f"{config.role} - {config.name} - Interview Report"
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Session Overview")
    stamp = (generated_at or datetime.now()).strftime("%d %b %Y, %I:%M %p")
    _meta_block(
        pdf,
        [
            ("Candidate", config.name),
            ("Role", config.role),
            ("Interview Type", config.interview_type.upper()),
            ("Level", config.interview_level.title()),
            ("Report", report.kind.title()),
            ("Generated", stamp),
        ],
    )

    _render_overall(pdf, report.overall_score)
    _section_title(pdf, "Score Breakdown")
    _render_score_table(pdf, _score_rows(report))

    _section_title(pdf, "Strengths")
    _render_bullets(pdf, report.strengths, "No strengths recorded.")
    _section_title(pdf, "Areas to Improve")
    _render_bullets(pdf, report.weaknesses, "Nothing flagged.")
    _section_title(pdf, "Suggestions")
    _render_bullets(pdf, report.suggestions, "No suggestions.")

    if report.ats_result is not None:
        ats = report.ats_result
        _section_title(pdf, "Resume ATS Analysis")
        _meta_block(
            pdf,
            [
                ("ATS Score", f"{ats.ats_score}/100"),
                ("Keyword Match", f"{ats.keyword_match_percent}%"),
                ("Role Compatibility", f"{ats.role_compatibility_score}%"),
                ("", ""),
            ],
        )
        pdf.set_font("Helvetica", "", 11)
        pdf.multi_cell(_effective_width(pdf), 6, ats.summary, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(2)
        if ats.missing_keywords:
            _render_bullets(pdf, [f"Missing keyword: {word}" for word in ats.missing_keywords], "")

    _section_title(pdf, "Question & Answer Transcript")
    _render_answers(pdf, report.answers)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "generate_report_pdf", "score_band"]
