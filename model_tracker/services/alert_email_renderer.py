"""HTML and plain-text renderings of a change alert email."""

from datetime import date, datetime
from html import escape
from itertools import groupby

from model_tracker.services.portfolio.portfolio_types import ChangeAlert, PortfolioChange

CHANGE_ALERT_SUBJECT = "Changes required in the Following Family Models Today"

ADDED_LABEL = "ADDED (New Trades - shown in GREEN):"
REMOVED_LABEL = "REMOVED (No longer in portfolio):"
INSTRUCTIONS = [
    "GREEN holdings in the email indicate new trades that need to be implemented",
    "REMOVED holdings are positions that should be sold/closed",
    "Please review the latest StockApp Systems email for complete details",
    "This alert was generated automatically from your portfolio tracking system",
]

STYLE = """
    body { font-family: Arial, sans-serif; line-height: 1.6; margin: 20px; }
    .header { background-color: #f8f9fa; padding: 20px; border-radius: 8px; margin-bottom: 30px; }
    .summary { background-color: #e3f2fd; padding: 15px; border-radius: 6px; margin-bottom: 25px; }
    .account-section { margin-bottom: 30px; }
    .account-title { color: #1976d2; font-size: 18px; font-weight: bold; border-bottom: 2px solid #1976d2; }
    .model { border: 1px solid #ddd; padding: 15px; margin-bottom: 15px; border-radius: 6px; }
    .model-name { font-weight: bold; color: #333; font-size: 16px; margin-bottom: 10px; }
    .added { color: #4caf50; font-weight: bold; }
    .removed { color: #f44336; font-weight: bold; }
    .holding-list { margin: 5px 0; padding-left: 20px; }
    .footer { margin-top: 30px; padding-top: 20px; border-top: 1px solid #ddd; color: #666; font-size: 12px; }
"""


def format_alert_date(day: str) -> str:
    """'2025-06-02' -> 'Monday, June 2, 2025'."""
    parsed = date.fromisoformat(day)
    return f"{parsed:%A}, {parsed:%B} {parsed.day}, {parsed.year}"


def group_changes_by_account(changes: list[PortfolioChange]) -> dict[str, list[PortfolioChange]]:
    """Changes grouped by account, in the alert's (account, model) order."""
    ordered = sorted(changes, key=lambda change: (change.account_name, change.model_name))
    return {
        account: list(account_changes)
        for account, account_changes in groupby(ordered, key=lambda change: change.account_name)
    }


def _holding_list_html(label_class: str, label: str, holdings: list[str]) -> str:
    items = "".join(f'<div class="holding-item">&bull; {escape(holding)}</div>' for holding in holdings)
    return f'<div class="{label_class}">{escape(label)}</div><div class="holding-list">{items}</div>'


def render_change_alert_html(alert: ChangeAlert, generated_at: datetime | None = None) -> str:
    generated_at = generated_at or datetime.now()
    alert_date = format_alert_date(alert.date)

    sections = []
    for account_name, account_changes in group_changes_by_account(alert.changes).items():
        models = []
        for change in account_changes:
            parts = []
            if change.added_holdings:
                parts.append(_holding_list_html("added", ADDED_LABEL, change.added_holdings))
            if change.removed_holdings:
                parts.append(_holding_list_html("removed", REMOVED_LABEL, change.removed_holdings))
            models.append(
                f'<div class="model"><div class="model-name">{escape(change.model_name)}</div>'
                f'<div class="changes">{"".join(parts)}</div></div>'
            )
        sections.append(
            f'<div class="account-section"><div class="account-title">{escape(account_name)}</div>'
            f'{"".join(models)}</div>'
        )

    instructions = "".join(f"<li>{escape(line)}</li>" for line in INSTRUCTIONS)
    accounts = escape(", ".join(alert.affected_accounts))

    return f"""<html>
<head><style>{STYLE}</style></head>
<body>
  <div class="header">
    <h1>Portfolio Changes Required - {alert_date}</h1>
    <p>The following changes have been detected in your family portfolio models and require implementation:</p>
  </div>
  <div class="summary">
    <h2>Summary</h2>
    <ul>
      <li><strong>Total Changes:</strong> {alert.total_changes} models with changes</li>
      <li><strong>Affected Accounts:</strong> {len(alert.affected_accounts)} accounts</li>
      <li><strong>Accounts:</strong> {accounts}</li>
      <li><strong>Date:</strong> {alert_date}</li>
    </ul>
  </div>
  {"".join(sections)}
  <div class="footer">
    <p><strong>Instructions:</strong></p>
    <ul>{instructions}</ul>
    <p><em>Generated: {generated_at:%Y-%m-%d %H:%M:%S}</em></p>
  </div>
</body>
</html>"""


def render_change_alert_text(alert: ChangeAlert, generated_at: datetime | None = None) -> str:
    generated_at = generated_at or datetime.now()
    alert_date = format_alert_date(alert.date)

    lines = [
        f"PORTFOLIO CHANGES REQUIRED - {alert_date}",
        "",
        "SUMMARY:",
        f"- Total Changes: {alert.total_changes} models with changes",
        f"- Affected Accounts: {len(alert.affected_accounts)} accounts",
        f"- Accounts: {', '.join(alert.affected_accounts)}",
        f"- Date: {alert_date}",
        "",
    ]

    for account_name, account_changes in group_changes_by_account(alert.changes).items():
        lines += [account_name.upper(), "=" * len(account_name), ""]
        for change in account_changes:
            lines += [change.model_name, "-" * len(change.model_name)]
            if change.added_holdings:
                lines.append(ADDED_LABEL)
                lines += [f"  • {holding}" for holding in change.added_holdings]
                lines.append("")
            if change.removed_holdings:
                lines.append(REMOVED_LABEL)
                lines += [f"  • {holding}" for holding in change.removed_holdings]
                lines.append("")
            lines.append("")

    lines.append("INSTRUCTIONS:")
    lines += [f"- {line}" for line in INSTRUCTIONS]
    lines += ["", f"Generated: {generated_at:%Y-%m-%d %H:%M:%S}", ""]
    return "\n".join(lines)


def render_error_notification_html(message: str, occurred_at: datetime | None = None) -> str:
    occurred_at = occurred_at or datetime.now()
    return f"""
    <h2>Daily Portfolio Processing Failed</h2>
    <p>The daily change-detection run failed with the following error:</p>
    <pre>{escape(message)}</pre>
    <p><em>Time: {occurred_at:%Y-%m-%d %H:%M:%S}</em></p>
    """
