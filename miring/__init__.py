"""MIRING checklist validation for HML documents.

`MiringValidator` runs both tiers and returns a report; `schema_validator`
exposes the structural tier on its own.
"""

from .checklist import MiringValidator
from .errors import InitializationFailure
from .models import Diagnostic, Sample, SchemaRun, Severity

__all__ = ["MiringValidator", "InitializationFailure", "Diagnostic", "Sample", "SchemaRun", "Severity"]
