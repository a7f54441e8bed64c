"""
main.py – CLI entry point for the personal carbon-footprint engine.

Usage
-----
Baseline footprint of a profile:
    python -m footprint.main profile --file samples/profile.json

What-if footprint with a one-day override:
    python -m footprint.main profile --file samples/profile.json --override samples/today.json

Flat onboarding answers (validated, then grouped into a profile):
    python -m footprint.main profile --file samples/answers.json --onboarding

Footprint of a daily log:
    python -m footprint.main daily-log --file samples/log.json

Walking offset for a step count:
    python -m footprint.main steps --count 10000

Show the active emission factor tables:
    python -m footprint.main factors --domain transport

Common options:
    --out result.json   (profile / daily-log: write the result as JSON)
    --verbose           (DEBUG logging)
"""
from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Mapping
from dataclasses import asdict, fields
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from footprint.calculations import (
    CarbonResult,
    avoided_carbon_from_steps,
    compute_footprint,
    merge_profiles,
    walking_distance_km,
)
from footprint.config import Config, get_config
from footprint.constants import DOMAINS
from footprint.daily_log import compute_footprint_from_daily_log
from footprint.emission_factors import EmissionFactorRegistry, load_registry
from footprint.io_utils import read_json_object, write_json
from footprint.recommendations import categorize, generate_recommendations
from footprint.schemas import InvalidProfileFieldError, parse_profile
from footprint.validators import build_profile, normalise_log_date, validate_onboarding

console = Console()
log = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Shared helpers
# ─────────────────────────────────────────────────────────────

def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_settings(args: argparse.Namespace) -> tuple[Config, EmissionFactorRegistry]:
    config = get_config()
    _configure_logging("DEBUG" if getattr(args, "verbose", False) else config.log_level)
    registry = load_registry(config.factors_file)
    return config, registry


def _print_breakdown(title: str, result: CarbonResult) -> None:
    """Render a rich table of per-domain emissions."""
    table = Table(title=title)
    table.add_column("Domain", style="bold")
    table.add_column("kg CO₂e / day", justify="right")
    for domain, value in asdict(result.breakdown).items():
        table.add_row(domain, f"{value:.2f}")
    table.add_row("[bold]TOTAL[/]", f"[bold]{result.total:.2f}[/]")
    console.print(table)


# ─────────────────────────────────────────────────────────────
# Sub-commands
# ─────────────────────────────────────────────────────────────

def cmd_profile(args: argparse.Namespace) -> int:
    """Score a baseline profile, optionally with a one-day override."""
    config, registry = _load_settings(args)

    data = read_json_object(args.file)
    if args.onboarding:
        answers, warnings = validate_onboarding(data)
        if warnings:
            for w in warnings:
                console.print(f"  [yellow]![/] {w}")
            console.print("[red]Error:[/] Onboarding answers are incomplete.")
            return 1
        profile = build_profile(answers)
    else:
        profile = parse_profile(data)

    if args.override:
        profile = merge_profiles(profile, read_json_object(args.override))
        log.info("Applied override from %s", args.override)

    result = compute_footprint(profile, registry)
    category = categorize(result.total, config.category_scheme)
    recommendations = generate_recommendations(profile, result.total, config.recommendation_limit)

    title = "What-if footprint" if args.override else "Baseline footprint"
    _print_breakdown(title, result)
    console.print(Panel(f"[bold]{result.total:.2f}[/] {result.unit}  →  [bold]{category}[/]", style="blue"))
    for rec in recommendations:
        console.print(f"  [green]•[/] [bold]{rec.category}[/]: {rec.suggestion} ({rec.potential_saving})")

    if args.out:
        payload = {
            **result.to_dict(),
            "category": category,
            "recommendations": [asdict(r) for r in recommendations],
        }
        console.print(f"[cyan]→[/] Wrote {write_json(args.out, payload)}")
    return 0


def cmd_daily_log(args: argparse.Namespace) -> int:
    """Score one day's activity log."""
    _config, registry = _load_settings(args)

    data = read_json_object(args.file)
    if "date" in data:
        date = normalise_log_date(data["date"])
        if date is None and data["date"] is not None:
            console.print(f"  [yellow]![/] Could not parse date: '{data['date']}'")
        data["date"] = date

    result = compute_footprint_from_daily_log(data, registry)
    _print_breakdown(f"Daily log {data.get('date') or ''}".strip(), result)

    payload: dict[str, Any] = result.to_dict()
    payload["date"] = data.get("date")
    if data.get("steps") is not None:
        payload["distanceKm"] = walking_distance_km(data["steps"])
        payload["avoidedCarbon"] = avoided_carbon_from_steps(data["steps"])
        console.print(
            f"  [green]•[/] Walked {payload['distanceKm']:.2f} km, "
            f"avoiding {payload['avoidedCarbon']:.2f} kg CO₂e"
        )

    if args.out:
        console.print(f"[cyan]→[/] Wrote {write_json(args.out, payload)}")
    return 0


def cmd_steps(args: argparse.Namespace) -> int:
    """Convert a step count to distance and avoided car emissions."""
    distance = walking_distance_km(args.count)
    avoided = avoided_carbon_from_steps(args.count)
    console.print(f"{args.count} steps ≈ {distance:.2f} km → {avoided:.2f} kg CO₂e avoided")
    return 0


def _factor_rows(section: Any) -> list[tuple[str, str, str]]:
    rows: list[tuple[str, str, str]] = []
    for f in fields(section):
        value = getattr(section, f.name)
        if isinstance(value, Mapping):
            for key, factor in value.items():
                if hasattr(factor, "base"):
                    shown = f"base={factor.base} fuel_sensitive={factor.fuel_sensitive}"
                else:
                    shown = f"{factor:g}"
                rows.append((f.name, str(key), shown))
        else:
            rows.append((f.name, "", f"{value:g}"))
    return rows


def cmd_factors(args: argparse.Namespace) -> int:
    """Print the active emission factor tables."""
    _config, registry = _load_settings(args)
    sections = [args.domain] if args.domain else [f.name for f in fields(registry)]
    for name in sections:
        table = Table(title=f"{name} factors")
        table.add_column("Table", style="bold")
        table.add_column("Key")
        table.add_column("Value", justify="right")
        for row in _factor_rows(getattr(registry, name)):
            table.add_row(*row)
        console.print(table)
    return 0


# ─────────────────────────────────────────────────────────────
# Argument parsing
# ─────────────────────────────────────────────────────────────

def _build_shared_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments shared by the scoring sub-commands."""
    parser.add_argument(
        "--out",
        default=None,
        help="Write the result to this JSON file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Log every factor applied (DEBUG level)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Construct and return the top-level argument parser."""
    root = argparse.ArgumentParser(
        prog="python -m footprint.main",
        description="Personal carbon-footprint engine – local CLI tool.",
    )
    sub = root.add_subparsers(dest="command", required=True)

    # ── profile (baseline / what-if) ─────────────────────────────
    p_profile = sub.add_parser("profile", help="Score a lifestyle profile.")
    p_profile.add_argument("--file", required=True, help="Profile JSON file")
    p_profile.add_argument(
        "--override",
        default=None,
        help="Partial profile JSON applied over the baseline for a what-if score",
    )
    p_profile.add_argument(
        "--onboarding",
        action="store_true",
        default=False,
        help="Treat --file as flat onboarding answers (validated before scoring)",
    )
    _build_shared_args(p_profile)

    # ── daily-log ──────────────────────────────────────────────
    p_daily = sub.add_parser("daily-log", help="Score one day's activity log.")
    p_daily.add_argument("--file", required=True, help="Daily log JSON file")
    _build_shared_args(p_daily)

    # ── steps ──────────────────────────────────────────────────
    p_steps = sub.add_parser("steps", help="Walking distance and avoided CO₂e for a step count.")
    p_steps.add_argument("--count", type=int, required=True, help="Number of steps")

    # ── factors ────────────────────────────────────────────────
    p_factors = sub.add_parser("factors", help="Show the active emission factor tables.")
    p_factors.add_argument(
        "--domain",
        choices=[*DOMAINS, "daily_log"],
        default=None,
        help="Only show one section",
    )

    return root


# ─────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────

def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, dispatch, and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    dispatch = {
        "profile": cmd_profile,
        "daily-log": cmd_daily_log,
        "steps": cmd_steps,
        "factors": cmd_factors,
    }
    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except FileNotFoundError as exc:
        console.print(f"[red]Error:[/] File not found: {exc.filename}")
        return 1
    except EnvironmentError as exc:
        console.print(f"[red]Config error:[/] {exc}")
        return 1
    except InvalidProfileFieldError as exc:
        console.print(f"[red]Invalid input:[/] {exc}")
        return 2
    except ValueError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 1


def main() -> None:
    """Console-script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
