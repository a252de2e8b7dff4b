#!/usr/bin/env python3
"""
Command line analytics for trade journal exports.

Commands:
  market-condition        - Win rate and P/L per market condition.
  day-of-week             - Win rate and P/L per weekday.
  trend                   - With-trend vs against-trend trades.
  confluence-count        - Performance by number of confluences.
  confluence-combination  - Best performing confluence combinations.
  overview                - Headline metrics for the selected period.
  insights                - Key insights across all dimensions.
  check-rules             - Trades that break the active trading rules.

TRADES may be an export file or a directory of exports; it defaults to the
trades_directory from config.ini.
"""

import argparse
import calendar
import dataclasses
import json
import logging
from pathlib import Path
from typing import List, Optional

import analysis_insights
import file_utils
from config import Config
from metrics_names import MetricNames
from performance_overview import compute_overview
from rule_profile_manager import RuleProfileManager
from trade import Trade
from trade_analytics_engine import AnalyticsOptions, Dimension, TradeAnalyticsEngine
from trade_loader import load_trades, load_trades_from_dir
from trading_rules import check_trades

LOGGER = logging.getLogger(__name__)

DIMENSION_COMMANDS = {
    "market-condition": (Dimension.MARKET_CONDITION, "Market Condition Analysis"),
    "day-of-week": (Dimension.DAY_OF_WEEK, "Day of Week Analysis"),
    "trend": (Dimension.TREND, "Trend Analysis"),
    "confluence-count": (Dimension.CONFLUENCE_COUNT, "Confluence Count Analysis"),
    "confluence-combination": (Dimension.CONFLUENCE_COMBINATION, "Confluence Combination Analysis"),
}


def parse_month(value: str) -> int:
    """Accepts 1-12 or an English month name / abbreviation."""
    text = value.strip()
    if text.isdigit():
        month = int(text)
        if 1 <= month <= 12:
            return month
    else:
        lowered = text.lower()
        for index in range(1, 13):
            if lowered in (calendar.month_name[index].lower(), calendar.month_abbr[index].lower()):
                return index
    raise argparse.ArgumentTypeError(f"invalid month: {value!r}")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value!r}")
    return number


def _resolve(path_str: str) -> Path:
    path = Path(path_str)
    return path if path.is_absolute() else file_utils.data_path(*path.parts)


def load_input_trades(args: argparse.Namespace, config: Config) -> List[Trade]:
    source = Path(args.trades) if args.trades else _resolve(config.trades_directory)
    if source.is_dir():
        return load_trades_from_dir(
            str(source),
            config.trades_file_pattern,
            latest_only=not (args.all_exports or config.merge_exports),
            strict=args.strict,
        )
    if not source.exists():
        raise FileNotFoundError(f"Trades file '{source}' not found")
    return load_trades(str(source), strict=args.strict)


def build_options(args: argparse.Namespace) -> AnalyticsOptions:
    market_condition = args.market_condition
    if market_condition is not None and market_condition.lower() == "all":
        market_condition = None
    return AnalyticsOptions(
        month=args.month,
        year=args.year,
        market_condition=market_condition,
        split_by_market_condition=getattr(args, "split_market_condition", False),
        combination_by_type_only=getattr(args, "by_type", False),
        combination_limit=getattr(args, "limit", None),
    )


def print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_dimension(args: argparse.Namespace, config: Config, trades: List[Trade]) -> int:
    engine = TradeAnalyticsEngine.from_config(config)
    dimension, title = DIMENSION_COMMANDS[args.command]
    summaries = engine.summarize(trades, dimension, build_options(args))
    if args.json:
        print_json([summary.to_dict() for summary in summaries])
    else:
        if dimension == Dimension.CONFLUENCE_COMBINATION:
            summaries = [
                dataclasses.replace(
                    s, group_key=analysis_insights.format_combination(s.group_key, engine.combination_separator)
                )
                for s in summaries
            ]
        engine.print_table(summaries, title)
    return 0


def cmd_overview(args: argparse.Namespace, config: Config, trades: List[Trade]) -> int:
    engine = TradeAnalyticsEngine.from_config(config)
    overview = compute_overview(trades, build_options(args), engine)
    if args.json:
        print_json(overview.to_dict())
        return 0
    print("\n--- Performance Overview ---")
    for label, value in MetricNames.overview_rows(overview):
        print(f"{label:<24} {value:>12}")
    return 0


def cmd_insights(args: argparse.Namespace, config: Config, trades: List[Trade]) -> int:
    engine = TradeAnalyticsEngine.from_config(config)
    options = build_options(args)
    market = analysis_insights.best_and_worst(engine.summarize_by_market_condition(trades, options))
    days = analysis_insights.best_and_worst(engine.summarize_by_day_of_week(trades, options))
    trend = analysis_insights.trend_comparison(engine.summarize_by_trend_alignment(trades, options))
    counts = analysis_insights.best_and_worst(engine.summarize_by_confluence_count(trades, options))
    combos = analysis_insights.top_combinations(engine.summarize_by_confluence_combination(trades, options))

    sections = []
    if market:
        sections.append(("Market Condition", analysis_insights.describe_best_and_worst(market, "Market Condition")))
    if days:
        sections.append(("Day of Week", analysis_insights.describe_best_and_worst(days, "Day")))
    if trend:
        sections.append(("Trend", analysis_insights.describe_trend(trend)))
    if counts:
        sections.append(("Confluence Count", analysis_insights.describe_best_and_worst(counts, "Confluence Count")))
    combo_lines = [
        f"Best by Win Rate: {analysis_insights.format_combination(s.group_key, engine.combination_separator)}"
        f" - {s.win_rate}% WR ({s.total} trades)"
        for s in combos["by_win_rate"]
    ] + [
        f"Best by Total P/L: {analysis_insights.format_combination(s.group_key, engine.combination_separator)}"
        f" - ${s.profit_loss:.2f} P/L ({s.win_rate}% WR, {s.total} trades)"
        for s in combos["by_profit_loss"]
    ]
    if combo_lines:
        sections.append(("Confluence Combinations", combo_lines))

    if args.json:
        print_json({title: lines for title, lines in sections})
        return 0
    if not sections:
        print("No trades to analyze.")
        return 1
    for title, lines in sections:
        print(f"\n{title}:")
        for line in lines:
            print(f"  - {line}")
    return 0


def cmd_check_rules(args: argparse.Namespace, config: Config, trades: List[Trade]) -> int:
    manager = RuleProfileManager(
        config_dir=str(_resolve(config.rules_profile_dir)),
        default_profile=config.rules_default_profile,
    )
    try:
        rules = manager.load_rules(args.profile)
    except FileNotFoundError as exc:
        print(exc)
        return 2
    except ValueError as exc:
        print(exc)
        return 1

    engine = TradeAnalyticsEngine.from_config(config)
    results = check_trades(engine.filter_trades(trades, build_options(args)), rules)
    if args.json:
        print_json([
            {"tradeId": r.trade.id, "date": r.trade.date, "violations": [v.to_dict() for v in r.violations]}
            for r in results
        ])
        return 0
    if not results:
        print("No rule violations found.")
        return 0
    for result in results:
        trade = result.trade
        details = "; ".join(
            f"{v.rule_type.value}: {v.violated_value} (allowed: {', '.join(v.allowed_values)})"
            for v in result.violations
        )
        print(f"{trade.date or '-'}\t{trade.id or '-'}\t{trade.pair or '-'}\t{details}")
    print(f"\n{len(results)} trade(s) broke at least one rule.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze trade journal exports."
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("trades", nargs="?", help="Trade export file or directory of exports.")
    common.add_argument("--month", type=parse_month, help="Only trades in this month (1-12 or name).")
    common.add_argument("--year", type=int, help="Only trades in this year.")
    common.add_argument(
        "--market-condition",
        help="Only trades with this exact market condition ('All' for no filter).",
    )
    common.add_argument("--json", action="store_true", help="Print JSON instead of a table.")
    common.add_argument("--strict", action="store_true", help="Fail on invalid trade rows instead of skipping them.")
    common.add_argument(
        "--all-exports",
        action="store_true",
        help="When TRADES is a directory, merge every matching export instead of the newest only.",
    )

    for command, (_, title) in DIMENSION_COMMANDS.items():
        sub = subparsers.add_parser(command, parents=[common], help=title)
        if command == "confluence-combination":
            sub.add_argument(
                "--split-market-condition",
                action="store_true",
                help="Report each combination separately per market condition.",
            )
            sub.add_argument(
                "--by-type",
                action="store_true",
                help="Group by confluence type only, ignoring the recorded values.",
            )
            sub.add_argument("--limit", type=positive_int, help="Number of combinations to report.")

    subparsers.add_parser("overview", parents=[common], help="Headline performance metrics.")
    subparsers.add_parser("insights", parents=[common], help="Key insights across all dimensions.")
    rules_parser = subparsers.add_parser("check-rules", parents=[common], help="List trades breaking trading rules.")
    rules_parser.add_argument("--profile", "-p", help="Rule profile name; defaults to the active profile.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = Config()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        trades = load_input_trades(args, config)
    except FileNotFoundError as exc:
        print(exc)
        return 2
    except ValueError as exc:
        print(exc)
        return 1
    if not trades:
        print("No trades found.")
        return 1
    LOGGER.info("Analyzing %d trades", len(trades))

    if args.command in DIMENSION_COMMANDS:
        return cmd_dimension(args, config, trades)
    if args.command == "overview":
        return cmd_overview(args, config, trades)
    if args.command == "insights":
        return cmd_insights(args, config, trades)
    if args.command == "check-rules":
        return cmd_check_rules(args, config, trades)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
