import unittest

from deal_evaluator.cash_model import build_cash_model, monthly_amortization
from deal_evaluator.params import DealParameters

from scenarios import deal


class CashModelTests(unittest.TestCase):
    def setUp(self) -> None:
        self.model = build_cash_model(DealParameters(**deal()))

    def test_inception_cash_events(self) -> None:
        self.assertAlmostEqual(self.model.capex_total, 18_000.0)
        self.assertAlmostEqual(self.model.upfront_cash, 10_000.0)
        self.assertAlmostEqual(self.model.inception_cash, -8_000.0)

    def test_monthly_constants(self) -> None:
        self.assertAlmostEqual(self.model.recurring_revenue, 2_000.0)
        self.assertAlmostEqual(self.model.recurring_cost, 100.0)
        self.assertAlmostEqual(self.model.amort_primary, 8_000.0 / 24)
        self.assertAlmostEqual(self.model.amort_secondary, 7_000.0 / 24)
        self.assertAlmostEqual(self.model.amort_installation, 125.0)
        self.assertAlmostEqual(sum(self.model.amortization(1)), 750.0)

    def test_amortization_window(self) -> None:
        self.assertEqual(self.model.amortization(0), (0.0, 0.0, 0.0))
        self.assertAlmostEqual(sum(self.model.amortization(24)), 750.0)
        self.assertEqual(self.model.amortization(25), (0.0, 0.0, 0.0))

    def test_buckets_run_on_their_own_terms(self) -> None:
        model = build_cash_model(DealParameters(**deal(installation_amort_months=12)))
        self.assertAlmostEqual(model.amort_installation, 250.0)
        self.assertAlmostEqual(model.amortization(12)[2], 250.0)
        self.assertEqual(model.amortization(13)[2], 0.0)
        self.assertAlmostEqual(model.amortization(13)[0], 8_000.0 / 24)

    def test_non_positive_term_yields_no_amortization(self) -> None:
        model = build_cash_model(DealParameters(**deal(primary_hw_amort_months=0)))
        self.assertEqual(model.amort_primary, 0.0)
        self.assertEqual(model.amortization(1)[0], 0.0)
        self.assertEqual(monthly_amortization(1_000.0, -3), 0.0)
        self.assertEqual(monthly_amortization(1_000.0, 1), 1_000.0)

    def test_no_deferral_by_default(self) -> None:
        self.assertEqual(self.model.deferred_revenue_monthly, 0.0)
        self.assertEqual(self.model.deferred_revenue(1), 0.0)

    def test_deferred_upfront_revenue(self) -> None:
        params = DealParameters(
            term_months=12,
            units=10,
            upfront_payment_total=1_200,
            upfront_deferred_share=0.5,
            upfront_deferral_months=6,
        )
        model = build_cash_model(params)
        self.assertAlmostEqual(model.upfront_cash, 1_200.0)
        self.assertEqual(model.deferral_months, 6)
        self.assertAlmostEqual(model.deferred_revenue(1), 100.0)
        self.assertAlmostEqual(model.deferred_revenue(6), 100.0)
        self.assertEqual(model.deferred_revenue(0), 0.0)
        self.assertEqual(model.deferred_revenue(7), 0.0)

    def test_deferral_window_defaults_to_secondary_term_and_is_capped(self) -> None:
        base = dict(units=1, upfront_payment_total=100, upfront_deferred_share=1.0)
        model = build_cash_model(DealParameters(term_months=36, secondary_hw_amort_months=10, **base))
        self.assertEqual(model.deferral_months, 10)
        model = build_cash_model(DealParameters(term_months=3, upfront_deferral_months=12, **base))
        self.assertEqual(model.deferral_months, 3)
        model = build_cash_model(DealParameters(term_months=12, upfront_deferral_months=0, **base))
        self.assertEqual(model.deferral_months, 1)

    def test_zero_units_has_no_cash_events(self) -> None:
        model = build_cash_model(DealParameters(**deal(units=0, upfront_payment_total=5_000)))
        self.assertEqual(model.capex_total, 0.0)
        self.assertEqual(model.upfront_cash, 0.0)
        self.assertEqual(model.recurring_revenue, 0.0)
        self.assertEqual(model.recurring_cost, 0.0)


if __name__ == "__main__":
    unittest.main()
