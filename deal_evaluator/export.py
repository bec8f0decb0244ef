"""
Tabular views of an evaluation and the Excel export.

Values stay raw (base currency, fractions for percentages); number formats are applied
only inside the workbook.
"""
from dataclasses import asdict
from io import BytesIO

import pandas as pd
from openpyxl import load_workbook
from openpyxl.styles import Font

SCHEDULE_COLUMNS = {
    "period": "Month",
    "revenue": "Revenue",
    "recurring_revenue": "Recurring Revenue",
    "deferred_revenue": "Deferred Upfront Revenue",
    "cogs_recurring": "COGS - Recurring (cash)",
    "amort_primary": "COGS - Amort Primary HW (non-cash)",
    "amort_secondary": "COGS - Amort Secondary HW (non-cash)",
    "amort_installation": "COGS - Amort Installation (non-cash)",
    "amortization": "COGS - Amort Total (non-cash)",
    "total_cogs": "Total COGS",
    "gross_margin": "Gross Margin",
    "gross_margin_pct": "Gross Margin %",
    "operating_profit": "Operating Profit",
    "depreciation_addback": "Depreciation Add-back",
    "deferred_revenue_release": "Deferred Revenue Release (non-cash)",
    "capex_cash": "CAPEX Cash",
    "upfront_cash": "Upfront Cash",
    "fcf": "FCF",
    "cum_fcf": "Cumulative FCF",
}

ANNUAL_COLUMNS = {
    "year": "Year",
    "months": "Months Counted",
    "revenue": "Revenue",
    "cogs_recurring": "COGS Recurring",
    "amortization": "Amort (non-cash)",
    "total_cogs": "Total COGS",
    "gross_margin": "GM",
    "gross_margin_pct": "GM %",
    "operating_profit": "Op Profit",
    "fcf": "FCF",
    "cum_revenue": "Cum Revenue",
    "cum_fcf": "Cum FCF",
    "cogs_pct_revenue": "COGS % Rev",
    "operating_pct_revenue": "Op % Rev",
}

# Line items of the horizontal P&L and whether their total is a plain sum
HORIZONTAL_LINES = [
    ("revenue", True),
    ("cogs_recurring", True),
    ("amort_primary", True),
    ("amort_secondary", True),
    ("amort_installation", True),
    ("total_cogs", True),
    ("gross_margin", True),
    ("gross_margin_pct", False),
    ("operating_profit", True),
    ("capex_cash", True),
    ("upfront_cash", True),
    ("fcf", True),
    ("cum_fcf", False),
]

PERCENT_LABELS = {"Gross Margin %", "GM %", "COGS % Rev", "Op % Rev", "IRR (annual)", "IRR (monthly)",
                  "Blended Gross Margin %", "Discount Rate (annual)", "Upfront Deferred Share"}
COUNT_LABELS = {"Month", "Year", "Months Counted", "Payback (months)", "Term (months)", "Units",
                "Primary HW Amort (mo)", "Secondary HW Amort (mo)", "Installation Amort (mo)",
                "Upfront Deferral (mo)"}


# -------------------------
# DataFrame views
# -------------------------
def schedule_frame(rows) -> pd.DataFrame:
    df = pd.DataFrame([asdict(r) for r in rows], columns=list(SCHEDULE_COLUMNS))
    return df.rename(columns=SCHEDULE_COLUMNS)


def annual_frame(annual) -> pd.DataFrame:
    df = pd.DataFrame([asdict(a) for a in annual], columns=list(ANNUAL_COLUMNS))
    return df.rename(columns=ANNUAL_COLUMNS)


def horizontal_pnl(rows) -> pd.DataFrame:
    """Line items down, periods across (M0..Mn), plus a Total column."""
    data = {}
    for r in rows:
        data[f"M{r.period}"] = [getattr(r, name) for name, _ in HORIZONTAL_LINES]

    revenue = sum(r.revenue for r in rows)
    margin = sum(r.gross_margin for r in rows)
    totals = []
    for name, summed in HORIZONTAL_LINES:
        if summed:
            totals.append(sum(getattr(r, name) for r in rows))
        elif name == "gross_margin_pct":
            totals.append(margin / revenue if revenue > 0 else 0.0)
        else:
            totals.append(rows[-1].cum_fcf if rows else 0.0)
    data["Total"] = totals

    index = [SCHEDULE_COLUMNS[name] for name, _ in HORIZONTAL_LINES]
    return pd.DataFrame(data, index=index)


def summary_dict(summary) -> dict:
    return {
        "NPV": summary.npv,
        "IRR (annual)": summary.irr,
        "IRR (monthly)": summary.irr_monthly,
        "IRR Converged": summary.irr_converged,
        "Payback (months)": summary.payback_month,
        "Cash @ M0": summary.inception_cash,
        "Cumulative FCF": summary.cumulative_fcf,
        "Blended Gross Margin %": summary.blended_gross_margin_pct,
    }


def inputs_dict(params) -> dict:
    labels = {
        "term_months": "Term (months)",
        "units": "Units",
        "monthly_revenue_per_unit": "Revenue / unit / mo",
        "upfront_payment_per_unit": "Upfront Payment / unit",
        "upfront_payment_total": "Upfront Payment (total)",
        "primary_hw_capex_per_unit": "Primary HW CAPEX / unit",
        "secondary_hw_capex_per_unit": "Secondary HW CAPEX / unit",
        "installation_capex_per_unit": "Installation CAPEX / unit",
        "primary_hw_amort_months": "Primary HW Amort (mo)",
        "secondary_hw_amort_months": "Secondary HW Amort (mo)",
        "installation_amort_months": "Installation Amort (mo)",
        "connectivity_cost_per_unit": "Connectivity / unit / mo",
        "third_party_cost_per_unit": "3rd Party / unit / mo",
        "license_cost_per_unit": "License / unit / mo",
        "labor_cost_per_unit": "Labor / unit / mo",
        "warranty_cost_per_unit": "Warranty / unit / mo",
        "discount_rate_annual": "Discount Rate (annual)",
        "upfront_deferred_share": "Upfront Deferred Share",
        "upfront_deferral_months": "Upfront Deferral (mo)",
    }
    return {labels.get(k, k): v for k, v in params.model_dump().items()}


# -------------------------
# Excel export
# -------------------------
def dict_to_df_rowwise(d: dict, title: str):
    return pd.DataFrame(list(d.items()), columns=[title, "Value"])


def _format_sheet(ws, label_column=None):
    currency_fmt = '"$"#,##0.00'
    percent_fmt = '0.00%'

    headers = {ws.cell(row=1, column=c).value: c for c in range(1, ws.max_column + 1)}
    for c in range(1, ws.max_column + 1):
        ws.cell(row=1, column=c).font = Font(bold=True)

    for row in ws.iter_rows(min_row=2):
        for cell in row:
            val = cell.value
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                continue
            if label_column is not None:
                label = str(ws.cell(row=cell.row, column=label_column).value or "")
            else:
                label = next((h for h, c in headers.items() if c == cell.column), "")
            if label in PERCENT_LABELS:
                cell.number_format = percent_fmt
            elif label in COUNT_LABELS:
                cell.number_format = '0'
            else:
                cell.number_format = currency_fmt
            # Red negatives
            if val < 0:
                cell.font = Font(color="FF0000")


def evaluation_to_xlsx_bytes(params, evaluation) -> bytes:
    schedule, annual, summary = evaluation
    tmp = BytesIO()
    with pd.ExcelWriter(tmp, engine="openpyxl") as writer:
        dict_to_df_rowwise(inputs_dict(params), "Input").to_excel(writer, sheet_name="Inputs", index=False)
        dict_to_df_rowwise(summary_dict(summary), "Metric").to_excel(writer, sheet_name="Key Metrics", index=False)
        schedule_frame(schedule).to_excel(writer, sheet_name="Monthly", index=False)
        horizontal_pnl(schedule).to_excel(writer, sheet_name="Monthly P&L")
        annual_frame(annual).to_excel(writer, sheet_name="Annual P&L", index=False)
    tmp.seek(0)

    wb = load_workbook(tmp)
    _format_sheet(wb["Inputs"], label_column=1)
    _format_sheet(wb["Key Metrics"], label_column=1)
    _format_sheet(wb["Monthly"])
    _format_sheet(wb["Monthly P&L"], label_column=1)
    _format_sheet(wb["Annual P&L"])

    out = BytesIO()
    wb.save(out)
    out.seek(0)
    return out.getvalue()
