# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Statement reports: income statement, balance sheet, cash-flow statement,
debt schedule and equity distributions.
"""

from __future__ import annotations

from typing import Dict, Sequence

import pandas as pd

from .base import BALANCE, BaseReport


class ProfitAndLossReport(BaseReport):
    def lines(self) -> Dict[str, Sequence]:
        pnl = self._results.profit_and_loss
        return {
            "Sales Revenue": pnl.revenue_sales,
            "Rental Revenue": pnl.revenue_rent,
            "CAM Recoveries": pnl.revenue_cam,
            "Total Revenue": pnl.revenue,
            "Operating Expenses": pnl.opex,
            "EBITDA": pnl.ebitda,
            "Depreciation": pnl.depreciation,
            "EBIT": pnl.ebit,
            "Interest": pnl.interest,
            "Financing Fees": pnl.fees,
            "Profit Before Tax": pnl.pbt,
            "Corporate Tax": pnl.corp_tax,
            "Zakat": pnl.zakat,
            "PATMI": pnl.patmi,
        }


class BalanceSheetReport(BaseReport):
    def lines(self) -> Dict[str, Sequence]:
        bs = self._results.balance_sheet
        return {
            "Cash": bs.cash,
            "Accounts Receivable": bs.accounts_receivable,
            "DSRA": bs.dsra,
            "Net Book Value": bs.nbv,
            "VAT Recoverable": bs.vat_asset,
            "Contract Asset": bs.contract_asset,
            "Total Assets": bs.assets_total,
            "Debt": bs.debt,
            "VAT Payable": bs.vat_liability,
            "Deferred Revenue": bs.deferred_revenue,
            "Total Liabilities": bs.liabilities_total,
            "Paid-in Equity": bs.paid_in_equity,
            "Retained Earnings": bs.retained_earnings,
            "Total Equity": bs.equity_total,
            "Total Liabilities and Equity": bs.liab_equity_total,
            "Imbalance": bs.imbalance,
        }

    def line_types(self) -> Dict[str, str]:
        return {label: BALANCE for label in self.lines()}


class CashFlowReport(BaseReport):
    def lines(self) -> Dict[str, Sequence]:
        cash = self._results.cash
        return {
            "Cash Revenue": cash.cash_revenue,
            "Capex": cash.capex,
            "Opex": cash.opex,
            "Project Cash Before Financing": cash.project_before_fin,
            "Debt Draws": cash.draws,
            "Interest": cash.interest,
            "Principal": cash.principal,
            "Financing Fees": cash.fees,
            "DSRA Funding": cash.dsra_funding,
            "DSRA Release": cash.dsra_release,
            "VAT Settled": cash.vat_net,
            "VAT Pass-through": cash.vat_passthrough,
            "Corporate Tax": cash.corp_tax,
            "Zakat": cash.zakat,
            "Project Cash": cash.project,
            "Equity Cash Flow": cash.equity_cf,
            "Operating Activities": cash.operating,
            "Investing Activities": cash.investing,
            "Financing Activities": cash.financing,
            "Net Cash Flow": cash.net_cash_flow,
            "Closing Cash": cash.cash_balance,
        }

    def line_types(self) -> Dict[str, str]:
        return {"Closing Cash": BALANCE}


class DebtScheduleReport(BaseReport):
    def lines(self) -> Dict[str, Sequence]:
        fin = self._results.financing
        return {
            "Funding Need": fin.funding_need,
            "Draws": fin.draws,
            "Interest": fin.interest,
            "Principal": fin.principal,
            "Upfront Fees": fin.upfront_fees,
            "Ongoing Fees": fin.ongoing_fees,
            "Commitment Fees": fin.commitment_fees,
            "Debt Balance": fin.debt_balance,
            "DSRA Funding": fin.dsra_funding,
            "DSRA Release": fin.dsra_release,
            "DSRA Balance": fin.dsra_balance,
            "Unfunded Need": fin.unfunded_need,
        }

    def line_types(self) -> Dict[str, str]:
        return {"Debt Balance": BALANCE, "DSRA Balance": BALANCE}


class EquityDistributionReport(BaseReport):
    def lines(self) -> Dict[str, Sequence]:
        equity = self._results.equity
        lines: Dict[str, Sequence] = {
            "Capital Calls": equity.calls_total,
            "Distributions": equity.distributions_total,
            "GP Promote": equity.gp_promote,
            "GP Clawback": equity.gp_clawback,
        }
        for key, calls in equity.calls_by_investor.items():
            lines[f"{key} Calls"] = calls
            lines[f"{key} Distributions"] = equity.distributions_by_investor[key]
        return lines


def equity_kpis_table(results) -> pd.DataFrame:
    """One row per investor plus a 'total' row with IRR and multiples."""
    rows = {"total": results.equity.kpis}
    rows.update(results.equity.kpis_by_investor)
    fields = ("contributed", "distributed", "nav", "irr", "moic", "dpi", "rvpi", "tvpi")
    return pd.DataFrame(
        {key: {name: getattr(metrics, name) for name in fields} for key, metrics in rows.items()}
    ).T


def covenant_table(results) -> pd.DataFrame:
    """Portfolio DSCR/ICR with LTM variants, headroom and breach flags."""
    portfolio = results.covenants.portfolio
    return pd.DataFrame(
        {
            "DSCR": list(portfolio.dscr),
            "ICR": list(portfolio.icr),
            "DSCR LTM": list(portfolio.dscr_ltm),
            "ICR LTM": list(portfolio.icr_ltm),
            "DSCR Headroom": list(portfolio.dscr_headroom),
            "ICR Headroom": list(portfolio.icr_headroom),
            "Breach": list(portfolio.breach),
        },
        index=results.timeline.period_index,
    )
