"""Enhancement parameters and their documented ranges."""
from __future__ import annotations

import dataclasses
import math
import numbers
from typing import Any, Dict, Mapping, Tuple

from .buffers import InvalidInput

PARAMETER_RANGES: Dict[str, Tuple[float, float]] = {
    "brightness": (0.0, 200.0),
    "contrast": (0.0, 200.0),
    "saturation": (0.0, 200.0),
    "sharpness": (0.0, 200.0),
}


@dataclasses.dataclass(frozen=True)
class EnhancementParams:
    """Holds the four slider values for one enhancement call.

    All values are percentages. ``brightness``, ``contrast`` and ``saturation``
    are neutral at 100; ``sharpness`` is disabled at 0.
    """

    brightness: float = 100.0
    contrast: float = 100.0
    saturation: float = 100.0
    sharpness: float = 0.0

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        def ensure_range(name: str, value: float, minimum: float, maximum: float) -> None:
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidInput("parameter out of range", f"{name} must be a number, got {value!r}")
            if not (minimum <= value <= maximum):
                raise InvalidInput(
                    "parameter out of range", f"{name} must be between {minimum} and {maximum}, got {value}"
                )

        for name, (minimum, maximum) in PARAMETER_RANGES.items():
            ensure_range(name, getattr(self, name), minimum, maximum)

    @classmethod
    def clamped(cls, **values: float) -> "EnhancementParams":
        """Build params with every supplied value clamped into its range.

        This is the clamping step a slider performs before calling
        :func:`image_enhancer.enhance`. Unknown names and non-finite values
        are still rejected.
        """
        unknown = set(values) - set(PARAMETER_RANGES)
        if unknown:
            raise InvalidInput("parameter out of range", f"unknown parameter(s): {', '.join(sorted(unknown))}")
        resolved: Dict[str, float] = {}
        for name, value in values.items():
            number = float(value)
            if not math.isfinite(number):
                raise InvalidInput("parameter out of range", f"{name} must be finite, got {value!r}")
            minimum, maximum = PARAMETER_RANGES[name]
            resolved[name] = min(maximum, max(minimum, number))
        return cls(**resolved)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, clamp: bool = False) -> "EnhancementParams":
        unknown = set(data) - set(PARAMETER_RANGES)
        if unknown:
            raise InvalidInput("parameter out of range", f"unknown parameter(s): {', '.join(sorted(unknown))}")
        if clamp:
            return cls.clamped(**data)
        return cls(**data)

    def replace(self, **changes: float) -> "EnhancementParams":
        return dataclasses.replace(self, **changes)

    def as_dict(self) -> Dict[str, float]:
        return dataclasses.asdict(self)

    @property
    def is_identity(self) -> bool:
        return self == reset()


def reset() -> EnhancementParams:
    """Return the neutral parameter set used by "reset to original"."""
    return EnhancementParams(brightness=100.0, contrast=100.0, saturation=100.0, sharpness=0.0)


__all__ = ["EnhancementParams", "PARAMETER_RANGES", "reset"]
