"""CSV import of the roster and export of violation reports."""

from .export_csv import export_violations_csv, summarize_violations, violations_frame
from .import_csv import (
    import_assignments_csv,
    import_employees_csv,
    import_job_roles_csv,
    import_shift_types_csv,
)

__all__ = [
    "export_violations_csv",
    "summarize_violations",
    "violations_frame",
    "import_assignments_csv",
    "import_employees_csv",
    "import_job_roles_csv",
    "import_shift_types_csv",
]
