import argparse
import sys
from .logging_config import configure_logging
from .service import TechDebtService
from .signals import DebtType, Severity
from .utils import to_json


def main(argv=None):
    parser = argparse.ArgumentParser(prog="techdebt", description="Tech Debt Discover Agent")
    sub = parser.add_subparsers(dest="cmd", required=True)

    scan = sub.add_parser("scan", help="Scan a source tree for technical debt")
    scan.add_argument("path", nargs="?", default=None, help="Directory to scan (default: current directory)")
    scan.add_argument(
        "--types", nargs="+", default=None, metavar="TYPE",
        help=f"Debt types to report: {', '.join(t.value for t in DebtType)}",
    )
    scan.add_argument(
        "--severity", default=None, metavar="LEVEL",
        help=f"Minimum severity: {', '.join(s.value for s in Severity)}",
    )
    scan.add_argument("--limit", type=int, default=None, help="Show at most this many files")
    scan.add_argument("--json", action="store_true", help="Emit the full response as JSON")
    scan.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING or ERROR")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    params = {"directory": args.path, "includeTypes": args.types, "severity": args.severity, "limit": args.limit}
    response = TechDebtService().list_tech_debt(params)

    if args.json:
        print(to_json(response.to_dict()))
    else:
        print(response.formatted_report)
    return 0 if response.success else 1


if __name__ == "__main__":
    sys.exit(main())
