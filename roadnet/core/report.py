"""
Generation report.

Every generation pass returns a report with the effective policy, warnings
raised by collaborator failures, and pass metrics.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List
import json


@dataclass
class GenerationReport:
    """
    Standard report structure for generation passes.

    Collaborator failures are recoverable: they add a warning and skip a
    single candidate. Errors mark the report as failed.
    """
    operation: str = "unknown"
    success: bool = True
    effective_policy: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        """Add an error message and mark as failed."""
        self.errors.append(message)
        self.success = False

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment an integer metric."""
        self.metadata[key] = self.metadata.get(key, 0) + amount


__all__ = ["GenerationReport"]
