"""
Policy dataclasses for parameterizing road network generation.

All generation entry points accept a GenerationPolicy that controls corner
spacing, jitter, branching probability and recursion limits. Policies are
immutable; a child chain receives a copy with its depth incremented.

Each policy includes:
- Default values defined here
- JSON schema docstring
- validate() returning error messages, check() raising ConfigurationError
"""

from dataclasses import dataclass, asdict, replace
from typing import Optional, Dict, Any, List


class ConfigurationError(ValueError):
    """Raised when generation parameters or inputs are invalid before generation starts."""


MAX_DEPTH_LIMIT = 15
MAX_BRANCHES_LIMIT = 15
MIN_CORNER_SPACING = 1.0


def validate_policy(policy: Any, required_fields: Optional[List[str]] = None) -> List[str]:
    """
    Validate a policy object.

    Parameters
    ----------
    policy : Any
        Policy dataclass instance to validate
    required_fields : List[str], optional
        List of field names that must be non-None

    Returns
    -------
    List[str]
        List of validation error messages (empty if valid)
    """
    errors = []

    if required_fields:
        for field_name in required_fields:
            if not hasattr(policy, field_name):
                errors.append(f"Missing required field: {field_name}")
            elif getattr(policy, field_name) is None:
                errors.append(f"Required field is None: {field_name}")

    if hasattr(policy, "validate"):
        errors.extend(policy.validate())

    return errors


@dataclass(frozen=True)
class GenerationPolicy:
    """
    Policy for road network generation.

    Controls how corners are placed along each chain and how side branches
    are discovered and accepted.

    JSON Schema:
    {
        "corner_spacing": float,
        "max_corner_offset": float (<= corner_spacing),
        "min_index_separation": int,
        "min_clearance_radius": float,
        "max_branch_radius": float (>= corner_spacing),
        "branch_chance": int (percent, 0-100),
        "max_branches_per_node": int,
        "max_depth": int,
        "depth": int,
        "exclusion_margin": float
    }
    """
    corner_spacing: float = 7.5
    max_corner_offset: float = 5.5
    min_index_separation: int = 5
    min_clearance_radius: float = 7.0
    max_branch_radius: float = 30.0
    branch_chance: int = 20
    max_branches_per_node: int = 2
    max_depth: int = 3
    depth: int = 0
    exclusion_margin: float = 1.0  # added to predecessor distance

    def validate(self) -> List[str]:
        """Return a list of validation error messages (empty if valid)."""
        errors = []

        if self.corner_spacing < MIN_CORNER_SPACING:
            errors.append(
                f"corner_spacing must be >= {MIN_CORNER_SPACING}, got {self.corner_spacing}"
            )
        if not 0.0 <= self.max_corner_offset <= self.corner_spacing:
            errors.append(
                f"max_corner_offset must be in [0, corner_spacing={self.corner_spacing}], "
                f"got {self.max_corner_offset}"
            )
        if self.min_index_separation < 1:
            errors.append(
                f"min_index_separation must be >= 1, got {self.min_index_separation}"
            )
        if not 0.0 <= self.min_clearance_radius <= self.corner_spacing:
            errors.append(
                f"min_clearance_radius must be in [0, corner_spacing={self.corner_spacing}], "
                f"got {self.min_clearance_radius}"
            )
        if self.max_branch_radius < self.corner_spacing:
            errors.append(
                f"max_branch_radius must be >= corner_spacing={self.corner_spacing}, "
                f"got {self.max_branch_radius}"
            )
        if not 0 <= self.branch_chance <= 100:
            errors.append(f"branch_chance must be in [0, 100], got {self.branch_chance}")
        if not 0 <= self.max_branches_per_node <= MAX_BRANCHES_LIMIT:
            errors.append(
                f"max_branches_per_node must be in [0, {MAX_BRANCHES_LIMIT}], "
                f"got {self.max_branches_per_node}"
            )
        if not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            errors.append(
                f"max_depth must be in [0, {MAX_DEPTH_LIMIT}], got {self.max_depth}"
            )
        if self.depth < 0:
            errors.append(f"depth must be >= 0, got {self.depth}")
        if self.exclusion_margin < 0.0:
            errors.append(f"exclusion_margin must be >= 0, got {self.exclusion_margin}")

        return errors

    def check(self) -> "GenerationPolicy":
        """
        Raise ConfigurationError if the policy is invalid.

        Returns
        -------
        GenerationPolicy
            self, to allow chaining
        """
        errors = self.validate()
        if errors:
            raise ConfigurationError("Invalid generation policy: " + "; ".join(errors))
        return self

    def for_child(self) -> "GenerationPolicy":
        """Copy of this policy for a child chain, one level deeper."""
        return replace(self, depth=self.depth + 1)

    @property
    def effective_branch_chance(self) -> float:
        """
        Branch chance in percent after depth decay.

        Decays hyperbolically with depth so deeper chains branch less often.
        """
        return self.branch_chance / (1.5 * self.depth + 1)

    @property
    def can_branch(self) -> bool:
        """Whether chains at this depth may spawn child chains."""
        return self.depth + 1 <= self.max_depth

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "GenerationPolicy":
        return GenerationPolicy(**{k: v for k, v in d.items() if k in GenerationPolicy.__dataclass_fields__})


def clamp_policy(policy: GenerationPolicy) -> GenerationPolicy:
    """
    Clamp a policy into its valid ranges.

    This belongs to the configuration layer (e.g. an editor form) and is
    never applied by the generation core, which rejects invalid policies
    instead.

    Parameters
    ----------
    policy : GenerationPolicy
        Possibly out-of-range policy

    Returns
    -------
    GenerationPolicy
        New policy with every field clamped
    """
    spacing = max(MIN_CORNER_SPACING, policy.corner_spacing)
    return replace(
        policy,
        corner_spacing=spacing,
        max_corner_offset=min(max(0.0, policy.max_corner_offset), spacing),
        min_index_separation=max(1, policy.min_index_separation),
        min_clearance_radius=min(max(0.0, policy.min_clearance_radius), spacing),
        max_branch_radius=max(spacing, policy.max_branch_radius),
        branch_chance=min(max(0, policy.branch_chance), 100),
        max_branches_per_node=min(max(0, policy.max_branches_per_node), MAX_BRANCHES_LIMIT),
        max_depth=min(max(0, policy.max_depth), MAX_DEPTH_LIMIT),
        depth=max(0, policy.depth),
        exclusion_margin=max(0.0, policy.exclusion_margin),
    )


__all__ = [
    "ConfigurationError",
    "GenerationPolicy",
    "validate_policy",
    "clamp_policy",
    "MAX_DEPTH_LIMIT",
    "MAX_BRANCHES_LIMIT",
    "MIN_CORNER_SPACING",
]
