"""Command-line interface for the staffing rule engine."""

from __future__ import annotations

import argparse
import json
from datetime import date
from pathlib import Path

from staffing_rules.config import EngineConfig, load_config
from staffing_rules.domain.db import get_session_factory, init_database, reset_database, session_scope
from staffing_rules.domain.repositories import RosterRepository
from staffing_rules.domain.rules import rule_type
from staffing_rules.engine.orchestrator import RuleEngine
from staffing_rules.engine.sorting import count_by_severity
from staffing_rules.io.export_csv import export_violations_csv, summarize_violations
from staffing_rules.io.import_csv import (
    import_assignments_csv,
    import_employees_csv,
    import_job_roles_csv,
    import_shift_types_csv,
)
from staffing_rules.services.persistence import RulePersistence
from staffing_rules.services.rule_store import RuleStore
from staffing_rules.services.templates import create_rule_from_template, get_rule_templates


def _config(args: argparse.Namespace) -> EngineConfig:
    cfg = load_config(args.config)
    if args.db:
        cfg.storage.db_url = args.db
    return cfg


def _rule_store(cfg: EngineConfig) -> RuleStore:
    persistence = RulePersistence(
        session_factory=get_session_factory(cfg.storage.db_url),
        local_path=cfg.storage.local_rules_path,
    )
    store = RuleStore(persistence=persistence)
    store.load()
    return store


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    cfg = _config(args)
    if args.reset:
        reset_database(cfg.storage.db_url)
    else:
        init_database(cfg.storage.db_url)
    print(f"[OK] Database initialized: {cfg.storage.db_url}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import roster CSVs into the database."""
    cfg = _config(args)
    try:
        with session_scope(get_session_factory(cfg.storage.db_url)) as session:
            # roles and shift types first so employee/assignment references resolve
            if args.roles:
                import_job_roles_csv(session, args.roles)
            if args.shift_types:
                import_shift_types_csv(session, args.shift_types)
            if args.employees:
                import_employees_csv(session, args.employees)
            if args.assignments:
                import_assignments_csv(session, args.assignments)
        print("[OK] CSV import complete")
    except Exception as e:
        print(f"[ERROR] Import failed: {e}")
        raise


def _cmd_evaluate(args: argparse.Namespace) -> None:
    """Evaluate all enabled rules for an interval."""
    cfg = _config(args)
    try:
        with session_scope(get_session_factory(cfg.storage.db_url)) as session:
            roster = RosterRepository.load_roster(session)
        engine = RuleEngine(roster, store=_rule_store(cfg), config=cfg)

        start = date.fromisoformat(args.start) if args.start else None
        violations = engine.evaluate_rules(start, args.days)

        for v in violations:
            who = f" [{v.employee_name}]" if v.employee_name else ""
            print(f"{v.date}  {v.severity.upper():7} {v.rule_name}{who}: {v.message}")

        counts = count_by_severity(violations)
        print(f"[OK] {len(violations)} violations "
              f"({counts['error']} errors, {counts['warning']} warnings, {counts['info']} info)")

        if args.out:
            export_violations_csv(violations, args.out)
        if args.summary:
            summarize_violations(violations).to_csv(args.summary)
            print(f"[INFO] Wrote summary to {args.summary}")
    except Exception as e:
        print(f"[ERROR] Evaluation failed: {e}")
        raise


def _cmd_rules_list(args: argparse.Namespace) -> None:
    store = _rule_store(_config(args))
    for rule in store:
        state = "on " if rule.enabled else "off"
        print(f"[{state}] {rule.id}  {rule.name}  ({rule_type(rule)})")


def _cmd_rules_templates(args: argparse.Namespace) -> None:
    for template in get_rule_templates():
        print(f"{template.id:34} {template.category:9} {template.name}")


def _cmd_rules_from_template(args: argparse.Namespace) -> None:
    store = _rule_store(_config(args))
    customizations = {"name": args.name} if args.name else None
    rule = store.add(create_rule_from_template(args.template_id, customizations))
    print(f"[OK] Added rule {rule.id} ({rule.name})")


def _cmd_rules_add(args: argparse.Namespace) -> None:
    store = _rule_store(_config(args))
    data = json.loads(Path(args.file).read_text(encoding="utf-8"))
    documents = data if isinstance(data, list) else [data]
    try:
        for document in documents:
            rule = store.add(document)
            print(f"[OK] Added rule {rule.id} ({rule.name})")
    except ValueError as e:
        print(f"[ERROR] {e}")
        raise


def _cmd_rules_remove(args: argparse.Namespace) -> None:
    store = _rule_store(_config(args))
    if store.remove(args.rule_id):
        print(f"[OK] Removed rule {args.rule_id}")
    else:
        print(f"[WARN] No rule with id {args.rule_id}")


def _set_enabled(args: argparse.Namespace, enabled: bool) -> None:
    store = _rule_store(_config(args))
    if store.set_enabled(args.rule_id, enabled):
        print(f"[OK] Rule {args.rule_id} {'enabled' if enabled else 'disabled'}")
    else:
        print(f"[WARN] No rule with id {args.rule_id}")


def _cmd_rules_enable(args: argparse.Namespace) -> None:
    _set_enabled(args, True)


def _cmd_rules_disable(args: argparse.Namespace) -> None:
    _set_enabled(args, False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staffing-rules",
        description="Staffing rule evaluation engine",
    )

    # Global options
    parser.add_argument("--db", help="Database URL (overrides config)")
    parser.add_argument("--config", help="Path to config YAML/JSON")

    sub = parser.add_subparsers(dest="command", required=True)

    # init-db command
    init = sub.add_parser("init-db", help="Initialize database")
    init.add_argument("--reset", action="store_true", help="Drop and recreate all tables (deletes data)")
    init.set_defaults(func=_cmd_init_db)

    # import-csv command
    imp = sub.add_parser("import-csv", help="Import roster CSVs into database")
    imp.add_argument("--roles", help="Path to job roles CSV")
    imp.add_argument("--shift-types", help="Path to shift types CSV")
    imp.add_argument("--employees", help="Path to employees CSV")
    imp.add_argument("--assignments", help="Path to assignments CSV")
    imp.set_defaults(func=_cmd_import_csv)

    # evaluate command
    ev = sub.add_parser("evaluate", help="Evaluate rules for an interval")
    ev.add_argument("--start", help="First date (YYYY-MM-DD); default from config")
    ev.add_argument("--days", type=int, help="Interval length in days; default from config")
    ev.add_argument("--out", help="Optional: export violations to CSV")
    ev.add_argument("--summary", help="Optional: export per-date severity counts to CSV")
    ev.set_defaults(func=_cmd_evaluate)

    # rules commands
    rules = sub.add_parser("rules", help="Manage stored rules")
    rules_sub = rules.add_subparsers(dest="rules_command", required=True)

    rules_sub.add_parser("list", help="List stored rules").set_defaults(func=_cmd_rules_list)
    rules_sub.add_parser("templates", help="List rule templates").set_defaults(func=_cmd_rules_templates)

    tpl = rules_sub.add_parser("from-template", help="Add a rule from a template")
    tpl.add_argument("template_id")
    tpl.add_argument("--name", help="Rule name (default: template's)")
    tpl.set_defaults(func=_cmd_rules_from_template)

    add = rules_sub.add_parser("add", help="Add rule(s) from a JSON file")
    add.add_argument("file")
    add.set_defaults(func=_cmd_rules_add)

    for name, func, help_text in (
        ("remove", _cmd_rules_remove, "Remove a rule"),
        ("enable", _cmd_rules_enable, "Enable a rule"),
        ("disable", _cmd_rules_disable, "Disable a rule"),
    ):
        cmd = rules_sub.add_parser(name, help=help_text)
        cmd.add_argument("rule_id")
        cmd.set_defaults(func=func)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
