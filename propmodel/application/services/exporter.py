"""Export services for analysis results.

Serializes the yearly cashflow table and summary ratios to delimited text
for download: one row per projected year, then a labeled exit-analysis
block and a labeled KPI block.
"""

import io
import os
import re
from datetime import datetime
from typing import List, Tuple

import pandas as pd

from propmodel.core.exceptions import ExportError
from propmodel.core.logging import get_logger
from propmodel.domain.models.analysis import InvestmentAnalysis
from propmodel.domain.models.multi_unit import MultiUnitAnalysis

log = get_logger(__name__)

CASHFLOW_COLUMNS = {
    "year": "Year",
    "gross_revenue": "Gross Revenue",
    "opex": "Opex",
    "noi": "NOI",
    "debt_service": "Debt Service",
    "net_cashflow": "Net Cashflow",
    "cumulative_cashflow": "Cumulative Cashflow",
}

UNIT_COLUMNS = {
    "name": "Unit",
    "area_m2": "Area (m2)",
    "allocation_share": "Allocation Share",
    "gross_rent": "Gross Rent",
    "allocated_costs": "Allocated Costs",
    "noi": "NOI",
    "debt_service_share": "Debt Service",
    "net_cashflow": "Net Cashflow",
    "after_tax_cashflow": "After-Tax Cashflow",
    "cash_on_cash": "Cash-on-Cash (%)",
    "dscr": "DSCR",
}


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-")
    return slug or "property"


class ResultExporter:
    """Handles exporting of analysis results."""

    def __init__(self, output_dir: str = "results", delimiter: str = ","):
        """Initialize exporter.

        Args:
            output_dir: Directory where files will be saved.
            delimiter: Field separator of the delimited text.
        """
        self.output_dir = output_dir
        self.delimiter = delimiter

    def _ensure_dir(self):
        """Ensure output directory exists."""
        if not os.path.exists(self.output_dir):
            try:
                os.makedirs(self.output_dir)
                log.info("created_output_directory", path=self.output_dir)
            except OSError as e:
                log.error("output_directory_creation_failed", error=str(e))
                raise ExportError(f"Cannot create {self.output_dir}: {e}") from e

    def _block(self, title: str, rows: List[Tuple[str, float]]) -> str:
        df = pd.DataFrame(rows, columns=["label", "value"])
        return title + "\n" + df.to_csv(sep=self.delimiter, header=False, index=False, lineterminator="\n")

    def cashflow_table(self, analysis: InvestmentAnalysis) -> pd.DataFrame:
        """Yearly projection as a DataFrame with display headers."""
        df = pd.DataFrame(
            [cf.model_dump() for cf in analysis.yearly_cashflows],
            columns=list(CASHFLOW_COLUMNS),
        )
        return df.rename(columns=CASHFLOW_COLUMNS)

    def analysis_to_csv(self, analysis: InvestmentAnalysis) -> str:
        """Render an analysis as delimited text."""
        table = self.cashflow_table(analysis).to_csv(
            sep=self.delimiter, index=False, lineterminator="\n"
        )

        exit_a = analysis.exit_analysis
        exit_block = self._block("Exit Analysis", [
            ("Market Value", exit_a.market_value),
            ("Remaining Debt", exit_a.remaining_debt),
            ("Disposal Costs", exit_a.disposal_costs),
            ("Net Exit", exit_a.net_exit),
            ("Total Return", exit_a.total_return),
        ])

        kpi_block = self._block("KPI", [
            ("Total Investment", analysis.total_investment),
            ("Equity", analysis.equity),
            ("Loan Amount", analysis.loan_amount),
            ("BAR (%)", analysis.bar),
            ("NAR (%)", analysis.nar),
            ("Cash-on-Cash (%)", analysis.cash_on_cash),
            ("DSCR", analysis.dscr),
            ("Break-even Occupancy (%)", analysis.break_even_occupancy),
            ("IRR (%)", analysis.irr),
        ])

        return "\n".join([table, exit_block, kpi_block])

    def multi_unit_to_csv(self, analysis: MultiUnitAnalysis) -> str:
        """Render a multi-unit analysis: unit table then portfolio KPIs."""
        units = pd.DataFrame(
            [u.model_dump() for u in analysis.units], columns=list(UNIT_COLUMNS)
        ).rename(columns=UNIT_COLUMNS)
        table = units.round(2).to_csv(sep=self.delimiter, index=False, lineterminator="\n")

        kpi_block = self._block("Portfolio", [
            ("Total Investment", analysis.total_investment),
            ("Equity", analysis.equity),
            ("Total Gross Rent", analysis.total_gross_rent),
            ("Total NOI", analysis.total_noi),
            ("Total Net Cashflow", analysis.total_net_cashflow),
            ("Cap Rate (%)", analysis.cap_rate),
            ("DSCR", analysis.dscr),
            ("Cash-on-Cash (%)", analysis.cash_on_cash),
            ("Break-even Occupancy (%)", analysis.break_even_occupancy),
            ("IRR (%)", analysis.irr),
        ])
        return "\n".join([table, kpi_block])

    def save_csv(
        self,
        analysis: InvestmentAnalysis,
        property_name: str = "property",
        timestamped: bool = False,
    ) -> str:
        """Write an analysis to ``<output_dir>/analysis-<name>.csv``.

        Returns:
            Path to the saved file.
        """
        return self._write(self.analysis_to_csv(analysis), "analysis", property_name, timestamped)

    def save_multi_unit_csv(
        self,
        analysis: MultiUnitAnalysis,
        property_name: str = "building",
        timestamped: bool = False,
    ) -> str:
        """Write a multi-unit analysis to ``<output_dir>/multi-unit-<name>.csv``."""
        return self._write(self.multi_unit_to_csv(analysis), "multi-unit", property_name, timestamped)

    def _write(self, content: str, prefix: str, name: str, timestamped: bool) -> str:
        self._ensure_dir()
        filename = f"{prefix}-{_slugify(name)}"
        if timestamped:
            filename += "_" + datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = os.path.join(self.output_dir, filename + ".csv")

        try:
            with open(filepath, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            log.error("csv_export_failed", path=filepath, error=str(e))
            raise ExportError(f"Cannot write {filepath}: {e}") from e

        log.info("csv_exported", path=filepath, bytes=len(content))
        return filepath


def read_cashflow_table(content: str, delimiter: str = ",") -> pd.DataFrame:
    """Parse the yearly table back from exported text (stops at the first blank line)."""
    table_text = content.split("\n\n", 1)[0]
    return pd.read_csv(io.StringIO(table_text), sep=delimiter)
