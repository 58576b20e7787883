# utils.py
import io
import math
from datetime import time
from typing import Iterable, Sequence

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from domain import ReportTotals, StatementLine

STATEMENT_COLUMNS = [
    "Data", "Empresa", "Função", "Horário", "Horas", "Extras",
    "Diária", "Extras (R$)", "Alim.", "Transp.", "Total",
]
SEPARATOR = ("---", "---")


def brl(x) -> str:
    """'R$ 1.234,56'; non-finite values are shown as zero."""
    try:
        x = float(x)
    except (TypeError, ValueError):
        x = 0.0
    if not math.isfinite(x):
        x = 0.0
    txt = f"{abs(x):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"-R$ {txt}" if x < 0 else f"R$ {txt}"


def parse_hhmm(s: str | None) -> time | None:
    if not s:
        return None
    try:
        hh, mm = s.strip().split(":")
        return time(int(hh), int(mm))
    except ValueError:
        return None


def time_options(step_min: int = 5) -> list[str]:
    return [f"{h:02d}:{m:02d}" for h in range(24) for m in range(0, 60, step_min)]


def statement_to_dataframe(lines: Iterable[StatementLine]) -> pd.DataFrame:
    rows = []
    for ln in lines:
        rows.append({
            "Data": ln.work_date.isoformat(),
            "Empresa": ln.company,
            "Função": ln.role,
            "Horário": ln.time_range,
            "Horas": f"{ln.hours_worked:.2f}",
            "Extras": f"{ln.overtime_hours:.2f}",
            "Diária": brl(ln.daily_rate),
            "Extras (R$)": brl(ln.overtime_pay),
            "Alim.": brl(ln.meal_allowance),
            "Transp.": brl(ln.transport_allowance),
            "Total": brl(ln.total),
        })
    return pd.DataFrame(rows, columns=STATEMENT_COLUMNS)


def report_rows(t: ReportTotals) -> list[tuple[str, float | str]]:
    """Profit report lines in print order, values still numeric."""
    return [
        ("Receita Empresa - Diárias", t.company_daily_revenue),
        ("Receita Empresa - Horas Extras", t.company_overtime_revenue),
        ("Receita Empresa - Total", t.company_revenue_total),
        SEPARATOR,
        ("Receita Trabalhador - Diárias", t.provider_daily_total),
        ("Receita Trabalhador - Horas Extras", t.provider_overtime_total),
        ("Receita Trabalhador - Alimentação", t.provider_meal_total),
        ("Receita Trabalhador - Transporte", t.provider_transport_total),
        ("Receita Trabalhador - Total", t.provider_pay_total),
        SEPARATOR,
        ("Custos Empresa (diárias + extras + outros)", t.company_cost_total),
        ("Outros Custos (mensal)", t.other_monthly_costs),
        ("Descontos Adicionais", t.additional_deductions),
        SEPARATOR,
        ("Lucro Final", t.net_profit),
    ]


def report_to_dataframe(t: ReportTotals) -> pd.DataFrame:
    rows = [
        {"Categoria": label, "Valor": value if value == "---" else brl(value)}
        for label, value in report_rows(t)
    ]
    return pd.DataFrame(rows, columns=["Categoria", "Valor"])


GRID_STYLE = TableStyle([
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, -1), 9),
    ("ALIGN", (0, 0), (-1, -1), "CENTER"),
    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ("LINEBELOW", (0, 0), (-1, 0), 0.8, colors.black),
    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F2F4F7")]),
])


def dataframe_to_pdf(
    df: pd.DataFrame,
    title: str,
    header_lines: Sequence[str] = (),
    summary_lines: Sequence[str] = (),
    wide: bool = True,
) -> bytes:
    """Renders ``df`` as a single table under ``title``.

    ``header_lines`` go above the table and ``summary_lines`` below it, one
    paragraph each.
    """
    styles = getSampleStyleSheet()
    body = styles["Normal"]
    total_style = ParagraphStyle("Total", parent=body, alignment=TA_CENTER, fontName="Helvetica-Bold", fontSize=11)

    story = [Paragraph(title, styles["Title"])]
    story += [Paragraph(line, body) for line in header_lines]
    story.append(Spacer(1, 10))
    if df.empty:
        story.append(Paragraph("Sem dados para exibir.", body))
    else:
        rows = [list(df.columns)] + df.astype(str).values.tolist()
        story.append(Table(rows, repeatRows=1, style=GRID_STYLE))
    if summary_lines:
        story.append(Spacer(1, 10))
        story += [Paragraph(line, total_style) for line in summary_lines]

    buf = io.BytesIO()
    SimpleDocTemplate(buf, pagesize=landscape(A4) if wide else A4, title=title).build(story)
    return buf.getvalue()
