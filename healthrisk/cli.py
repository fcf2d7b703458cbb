"""
Command-line risk evaluator.

Usage:
    healthrisk-eval assessment.json
    healthrisk-eval assessment.json --json
    healthrisk-eval --demo
"""
import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from healthrisk.core.errors import InvalidInput
from healthrisk.core.inference.risk_engine import RiskEngine, RiskResult, RiskCategory

# High-risk demo profile offered by the screening questionnaire
DEMO_PROFILE: Dict[str, Any] = {
    "age": 45,
    "gender": "male",
    "pincode_city": "Delhi",
    "income": "low",
    "education": "high_school",
    "housing": "poor",
    "healthcareAccess": 45,
    "environment": "industrial",
    "diet": 2,
    "smoking": "current_light",
    "alcohol": "frequent",
    "exercise": "none",
    "water": 2,
    "sleep": 6,
    "meditation": "none",
    "bmi": 29,
    "chronicDisease": True,
    "familyHistory": "heart_disease",
    "bloodPressure": "pre_hypertension",
    "diabetes": "pre_diabetic",
}

CATEGORY_STYLES = {
    RiskCategory.LOW: "green",
    RiskCategory.MODERATE: "yellow",
    RiskCategory.HIGH: "dark_orange",
    RiskCategory.CRITICAL: "bold red",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="healthrisk-eval",
        description="Evaluate a public-health screening questionnaire",
    )
    parser.add_argument("path", nargs="?", help="Assessment JSON file ('-' for stdin)")
    parser.add_argument("--demo", action="store_true", help="Evaluate the built-in high-risk demo profile")
    parser.add_argument("--json", action="store_true", dest="as_json", help="Print the raw result as JSON")
    return parser


def _load_payload(path: str) -> Any:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def render_result(result: RiskResult, console: Console) -> None:
    """Pretty-print a result."""
    style = CATEGORY_STYLES[result.category]
    headline = f"[{style}]{result.category.value}[/{style}]  score {result.score}/100"
    if result.emergency_flag:
        headline += "\n[bold red]Emergency: seek urgent care[/bold red]"
    console.print(Panel(headline, title="Risk Assessment"))

    table = Table(title="Factor Contributions", show_header=True, header_style="bold magenta")
    table.add_column("Rank", justify="right")
    table.add_column("Factor")
    table.add_column("Domain")
    table.add_column("Contribution", justify="right")
    for rank, factor in enumerate(result.factor_contributions, start=1):
        table.add_row(str(rank), factor.factor, factor.category, f"{factor.contribution}%")
    console.print(table)


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    console = console or Console()

    if args.demo:
        payload = DEMO_PROFILE
    elif args.path:
        try:
            payload = _load_payload(args.path)
        except (OSError, json.JSONDecodeError) as e:
            console.print(f"[red]Cannot read assessment:[/red] {e}")
            return 1
    else:
        console.print("[red]Provide an assessment file or --demo[/red]")
        return 1

    try:
        result = RiskEngine().evaluate(payload)
    except InvalidInput as e:
        console.print(f"[red]Invalid assessment:[/red] {e.message}")
        return 2

    if args.as_json:
        console.print_json(json.dumps(result.to_dict()))
    else:
        render_result(result, console)
    return 0


if __name__ == "__main__":
    sys.exit(main())
