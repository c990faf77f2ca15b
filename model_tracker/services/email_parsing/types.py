"""Value objects produced by portfolio email parsing."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass
class PerformanceData:
    """Extended metrics for a row of a model performance table."""

    final_equity: float = 0.0
    probability_win: float = 0.0
    return_ytd: float = 0.0
    return_1_month: float = 0.0
    return_3_month: float = 0.0
    return_6_month: float = 0.0
    return_12_month: float = 0.0
    trades_ytd: int = 0
    max_drawdown: float = 0.0
    current_drawdown: float = 0.0
    sharpe_ratio: float = 0.0
    cagr: float = 0.0
    volatility: float = 0.0
    portfolio: str = ""  # "SYMBOL (NN%)" tokens, newline separated
    ml_accuracies: str = ""
    green_holdings: list[str] = field(default_factory=list)


@dataclass
class Holding:
    """One security, or one model-as-a-row, extracted from an email table."""

    symbol: str
    name: str
    quantity: float = 0.0
    price: float = 0.0
    value: float = 0.0
    day_change: float = 0.0
    day_change_percent: float = 0.0
    performance: PerformanceData | None = None


@dataclass
class PortfolioData:
    """One table's worth of holdings attributed to an account."""

    account_name: str
    account_number: str
    holdings: list[Holding]
    total_value: float
    day_change: float
    day_change_percent: float
    date: str = ""  # ISO YYYY-MM-DD


@dataclass
class RawEmail:
    """Email as returned by the mail source."""

    id: str
    subject: str
    sender: str
    date: str
    html_body: str


class ParseStatus(str, Enum):
    PARSED = "parsed"
    SKIPPED = "skipped"
    MALFORMED = "malformed"


@dataclass
class ParseOutcome:
    """Result of considering one table or one row."""

    status: ParseStatus
    table_index: int
    row_index: int | None = None
    reason: str = ""


@dataclass
class ParseReport:
    """Aggregated outcomes for one email (or several, via merge)."""

    outcomes: list[ParseOutcome] = field(default_factory=list)

    def record(
        self,
        status: ParseStatus,
        table_index: int,
        row_index: int | None = None,
        reason: str = "",
    ) -> None:
        self.outcomes.append(ParseOutcome(status, table_index, row_index, reason))

    def merge(self, other: "ParseReport") -> None:
        self.outcomes.extend(other.outcomes)

    def count(self, status: ParseStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def parsed_count(self) -> int:
        return self.count(ParseStatus.PARSED)

    @property
    def skipped_count(self) -> int:
        return self.count(ParseStatus.SKIPPED)

    @property
    def malformed_count(self) -> int:
        return self.count(ParseStatus.MALFORMED)


@dataclass
class EmailParseResult:
    """Portfolios extracted from one email plus the parse report."""

    portfolios: list[PortfolioData]
    report: ParseReport

    @property
    def holdings(self) -> list[Holding]:
        return [holding for portfolio in self.portfolios for holding in portfolio.holdings]
