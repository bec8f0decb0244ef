import unittest
from io import BytesIO

from openpyxl import load_workbook

from deal_evaluator import DealParameters, evaluate
from deal_evaluator.export import (
    annual_frame,
    evaluation_to_xlsx_bytes,
    horizontal_pnl,
    inputs_dict,
    schedule_frame,
    summary_dict,
)

from scenarios import REFERENCE_DEAL


class FrameTests(unittest.TestCase):
    def setUp(self) -> None:
        self.params = DealParameters(**REFERENCE_DEAL)
        self.result = evaluate(self.params)

    def test_schedule_frame_columns(self) -> None:
        df = schedule_frame(self.result.schedule)
        self.assertEqual(df.columns[0], "Month")
        self.assertIn("Gross Margin %", df.columns)
        self.assertIn("COGS - Amort Installation (non-cash)", df.columns)
        self.assertAlmostEqual(df.loc[1, "FCF"], 1_900.0)

    def test_annual_frame_common_size(self) -> None:
        df = annual_frame(self.result.annual)
        self.assertEqual(len(df), 3)
        self.assertAlmostEqual(df.loc[0, "COGS % Rev"], 0.425)
        self.assertAlmostEqual(df.loc[0, "Op % Rev"], 0.575)

    def test_horizontal_pnl_totals(self) -> None:
        df = horizontal_pnl(self.result.schedule)
        self.assertEqual(list(df.columns[:2]), ["M0", "M1"])
        self.assertEqual(df.columns[-1], "Total")
        self.assertEqual(len(df.columns), 38)
        self.assertAlmostEqual(df.loc["Revenue", "Total"], 72_000.0)
        self.assertAlmostEqual(df.loc["Gross Margin %", "Total"], 0.7)
        self.assertAlmostEqual(df.loc["Cumulative FCF", "Total"], 60_400.0, places=6)
        self.assertAlmostEqual(df.loc["FCF", "Total"], 60_400.0, places=6)

    def test_summary_and_inputs(self) -> None:
        summary = summary_dict(self.result.summary)
        self.assertEqual(summary["Payback (months)"], 5)
        self.assertAlmostEqual(summary["Cash @ M0"], -8_000.0)
        inputs = inputs_dict(self.params)
        self.assertEqual(inputs["Term (months)"], 36)
        self.assertEqual(inputs["Units"], 100.0)


class WorkbookTests(unittest.TestCase):
    def test_workbook_sheets_and_styles(self) -> None:
        params = DealParameters(**REFERENCE_DEAL)
        data = evaluation_to_xlsx_bytes(params, evaluate(params))
        wb = load_workbook(BytesIO(data))
        self.assertEqual(wb.sheetnames, ["Inputs", "Key Metrics", "Monthly", "Monthly P&L", "Annual P&L"])

        ws = wb["Monthly"]
        self.assertEqual(ws.max_row, 38)
        headers = {ws.cell(row=1, column=c).value: c for c in range(1, ws.max_column + 1)}
        self.assertTrue(ws.cell(row=1, column=1).font.bold)

        fcf_m0 = ws.cell(row=2, column=headers["FCF"])
        self.assertAlmostEqual(fcf_m0.value, -8_000.0)
        self.assertTrue(fcf_m0.font.color.rgb.endswith("FF0000"))
        self.assertEqual(ws.cell(row=3, column=headers["Gross Margin %"]).number_format, "0.00%")
        self.assertEqual(ws.cell(row=3, column=headers["Month"]).number_format, "0")


if __name__ == "__main__":
    unittest.main()
