"""Base class for simulation configurations with change notification and GUI metadata.

Uses dataclasses with field metadata for range hints and fixed (construction
only) parameters.
"""

from __future__ import annotations

import math
import threading
import warnings
from dataclasses import dataclass, fields, field, MISSING
from typing import Any, Callable, TypeVar

T = TypeVar('T')


# Valid metadata keys for config fields
METADATA_KEYS = {
    "description",  # Field description for tooltips/help
    "fixed",        # Field can be set at init, then becomes readonly
    "label",        # Custom display label (auto-generated if omitted)
    "min",          # Minimum value (GUI hint)
    "max",          # Maximum value (GUI hint)
}


def config_field(
    default: T = MISSING,
    *,
    default_factory: Any = MISSING,
    description: str = "",
    label: str | None = None,
    min: float | int | None = None,
    max: float | int | None = None,
    fixed: bool = False,
) -> T:
    """Create a config field with metadata.

    Returns a dataclasses.Field at runtime, typed as T for the type checker.

    Examples:
        >>> decay: float = config_field(0.948, min=0.8, max=0.999, description="Field decay per frame")
        >>> texture_size: int = config_field(128, fixed=True, description="Grid resolution")
    """
    metadata: dict[str, Any] = {}
    if description:
        metadata["description"] = description
    if label:
        metadata["label"] = label
    if min is not None:
        metadata["min"] = min
    if max is not None:
        metadata["max"] = max
    if fixed:
        metadata["fixed"] = True

    return field(  # type: ignore[return-value]
        default=default,
        default_factory=default_factory,
        metadata=metadata
    )


def _generate_label(name: str) -> str:
    """"force_radius" -> "Force Radius", "normal_z" -> "Normal Z"."""
    return ' '.join(part if part.isupper() and len(part) > 1 else part.capitalize()
                    for part in name.split('_'))


@dataclass
class ConfigBase:
    """Base class for configs with change notification and GUI metadata.

    Example:
        @dataclass
        class MyConfig(ConfigBase):
            strength: float = config_field(1.0, min=0.0, max=10.0, description="Strength")
            resolution: int = config_field(128, fixed=True, description="Grid size")

    - fixed: field can be set in __init__, assigning it later raises AttributeError
    - min/max: GUI hints; out-of-range defaults only warn
    - undeclared attributes cannot be set

    Engines hold a reference to their config and take one snapshot() per
    frame, so assignments made between frames apply on the next update.
    """

    def __post_init__(self) -> None:
        object.__setattr__(self, '_listeners', set())
        object.__setattr__(self, '_lock', threading.Lock())

        fixed_set: set[str] = set()
        for f in fields(self):
            for key in f.metadata:
                if key not in METADATA_KEYS:
                    warnings.warn(
                        f"{self.__class__.__name__}.{f.name}: unknown metadata key '{key}' "
                        f"(valid keys: {', '.join(sorted(METADATA_KEYS))})",
                        UserWarning,
                        stacklevel=2
                    )

            if f.metadata.get('fixed'):
                fixed_set.add(f.name)

            if 'min' in f.metadata and 'max' in f.metadata:
                val = getattr(self, f.name)
                min_val, max_val = f.metadata['min'], f.metadata['max']
                if isinstance(val, (int, float)) and not (min_val <= val <= max_val):
                    warnings.warn(
                        f"{self.__class__.__name__}.{f.name}: value {val} "
                        f"is outside valid range [{min_val}, {max_val}]",
                        UserWarning,
                        stacklevel=2
                    )

        object.__setattr__(self, '_fixed_fields', fixed_set)
        object.__setattr__(self, '_initialized', True)

    def __setattr__(self, name: str, value: Any) -> None:
        """Only declared fields can be set; fixed fields only during __init__.

        Raises:
            AttributeError: If field is undeclared, or fixed.
        """
        if name.startswith('_'):
            object.__setattr__(self, name, value)
            return

        if name not in {f.name for f in fields(self)}:
            raise AttributeError(f"Cannot set undeclared attribute '{name}' on {self.__class__.__name__}")

        if not hasattr(self, '_initialized'):
            object.__setattr__(self, name, value)
            return

        if name in self._fixed_fields:  # type: ignore
            raise AttributeError(f"Cannot modify fixed field '{name}' of {self.__class__.__name__}")

        with self._lock:  # type: ignore
            object.__setattr__(self, name, value)
            listeners_copy = list(self._listeners)  # type: ignore

        # Listeners run outside the lock so they may touch the config
        for listener in listeners_copy:
            listener()

    def snapshot(self) -> dict[str, Any]:
        """Consistent copy of all field values."""
        with self._lock:  # type: ignore
            return {f.name: getattr(self, f.name) for f in fields(self)}

    def apply_partial(self, payload: Any) -> list[str]:
        """Apply values from a loosely typed mapping, e.g. parsed JSON.

        Keys that are not fields, fixed fields and values that cannot be
        coerced to the current value's type are skipped. Booleans are coerced,
        numbers must be finite, tuples accept lists of numbers.

        Returns:
            Names of the fields that were applied.
        """
        if not isinstance(payload, dict):
            return []

        applied: list[str] = []
        for f in fields(self):
            if f.name not in payload or f.name in self._fixed_fields:  # type: ignore
                continue
            value = self._coerce(getattr(self, f.name), payload[f.name])
            if value is None:
                continue
            setattr(self, f.name, value)
            applied.append(f.name)
        return applied

    @staticmethod
    def _coerce(current: Any, incoming: Any) -> Any:
        if isinstance(current, bool):
            return bool(incoming)
        if isinstance(current, (int, float)):
            if isinstance(incoming, bool):
                return None
            try:
                number = float(incoming)
            except (TypeError, ValueError):
                return None
            if not math.isfinite(number):
                return None
            return int(number) if isinstance(current, int) else number
        if isinstance(current, tuple):
            if not isinstance(incoming, (list, tuple)) or len(incoming) != len(current):
                return None
            items = [ConfigBase._coerce(c, i) for c, i in zip(current, incoming)]
            if any(item is None for item in items):
                return None
            return tuple(items)
        return None

    def watch(self, callback: Callable, attribute: str | None = None) -> Callable[[], None]:
        """Watch for config changes.

        Args:
            callback: callback() for any change, or callback(value) when an
                attribute is given.
            attribute: Optional field name to watch.

        Returns:
            Function that removes the listener.

        Raises:
            AttributeError: If the specified attribute does not exist.
        """
        if attribute is None:
            listener = callback
        else:
            if attribute not in {f.name for f in fields(self)}:
                raise AttributeError(f"Attribute '{attribute}' not found in {self.__class__.__name__}")

            def listener() -> None:
                callback(getattr(self, attribute))

        with self._lock:  # type: ignore
            self._listeners.add(listener)  # type: ignore

        def unwatch() -> None:
            with self._lock:  # type: ignore
                self._listeners.discard(listener)  # type: ignore
        return unwatch

    def info(self, attribute: str | None = None) -> dict[str, Any]:
        """Field metadata for GUI generation.

        Returns {field_name: {metadata}} or, for one attribute, {metadata}.
        Every entry carries type, default, value, label, description, min,
        max and fixed.
        """
        result: dict[str, dict[str, Any]] = {}
        for f in fields(self):
            if f.default is not MISSING:
                default_val = f.default
            elif f.default_factory is not MISSING:
                default_val = f.default_factory()
            else:
                default_val = None

            entry: dict[str, Any] = {
                **f.metadata,
                "type": f.type,
                "default": default_val,
                "value": getattr(self, f.name),
            }
            entry.setdefault("label", _generate_label(f.name))
            entry.setdefault("description", "")
            entry.setdefault("min", None)
            entry.setdefault("max", None)
            entry.setdefault("fixed", False)
            result[f.name] = entry

        if attribute is not None:
            if attribute not in result:
                raise AttributeError(f"Attribute '{attribute}' not found in {self.__class__.__name__}")
            return result[attribute]
        return result
