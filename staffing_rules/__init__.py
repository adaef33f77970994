"""Staffing rule evaluation engine.

Modules:
- config: engine configuration (YAML or JSON)
- errors: exceptions raised for invalid rules and unknown templates
- domain: SQLAlchemy roster models, rule/violation types, repositories
- engine: snapshots, condition dispatch, period metrics, cache, ordering
- engine.orchestrator: RuleEngine, the evaluation entry point
- services: rule store, templates, validation, persistence
- io: roster CSV import and violation CSV export
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "errors",
    "domain",
    "engine",
    "services",
    "io",
    "cli",
]
