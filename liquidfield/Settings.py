from dataclasses import dataclass, field
from typing import Any, TypeVar, cast
from typing_extensions import get_args, get_origin, get_type_hints

from enum import Enum
import json
import math
import dataclasses
import logging

from liquidfield.ConfigBase import ConfigBase
from liquidfield.flow.field import FluidFieldConfig
from liquidfield.flow.liquid import LiquidSolverConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Settings():
    # ENGINES
    fluid_enabled: bool                = True
    liquid_enabled: bool               = True
    fluid_resolution: int              = 128

    # FLUID FIELD SETTINGS
    fluid: FluidFieldConfig = field(default_factory=FluidFieldConfig)

    # LIQUID SOLVER SETTINGS
    liquid: LiquidSolverConfig = field(default_factory=LiquidSolverConfig)

    def save(self, path: str) -> None:
        with open(path, "w") as f:
            json.dump(Settings.serialize(self), f, indent=2)

    @classmethod
    def load(cls, path: str) -> 'Settings':
        with open(path, "r") as f:
            data = json.load(f)
        return Settings.deserialize(data, Settings)

    def apply_json(self, text: str) -> list[str]:
        """Apply a (partial) JSON settings document to this instance.

        Unknown keys, fixed fields and values of the wrong kind are skipped,
        so a stale or hand-edited document never breaks a running scene.

        Returns:
            Dotted names of the applied values, e.g. 'liquid.splat_gain'.

        Raises:
            json.JSONDecodeError: text is not JSON.
        """
        data: Any = json.loads(text)
        if not isinstance(data, dict):
            logger.warning(f"Settings: ignoring JSON {type(data).__name__}, expected an object")
            return []

        applied: list[str] = []
        for name in ('fluid_enabled', 'liquid_enabled'):
            if name in data:
                setattr(self, name, bool(data[name]))
                applied.append(name)
        if 'fluid_resolution' in data:
            value = data['fluid_resolution']
            if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
                self.fluid_resolution = int(value)
                applied.append('fluid_resolution')

        for name in ('fluid', 'liquid'):
            config: ConfigBase = getattr(self, name)
            applied.extend(f"{name}.{key}" for key in config.apply_partial(data.get(name)))
        return applied

    @staticmethod
    def serialize(obj) -> Any:
        if isinstance(obj, Enum):
            return obj.name
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {f.name: Settings.serialize(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
        if isinstance(obj, dict):
            return {k: Settings.serialize(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [Settings.serialize(v) for v in obj]
        return obj

    @staticmethod
    def deserialize(data: Any, target_type: type[T]) -> T:
        if dataclasses.is_dataclass(target_type):
            fields: tuple[dataclasses.Field[Any], ...] = dataclasses.fields(target_type)
            hints: dict[str, Any] = get_type_hints(target_type)
            field_types: dict[str, Any] = {f.name: hints.get(f.name, f.type) for f in fields if f.init}
            kwargs: dict[str, Any] = {}
            for key, value in data.items():
                if key in field_types:
                    field_type: Any = field_types[key]
                    if isinstance(field_type, str):
                        kwargs[key] = value
                    else:
                        kwargs[key] = Settings.deserialize(value, field_type)
            return cast(T, target_type(**kwargs))

        origin: Any = get_origin(target_type)
        if origin is list:
            args: tuple[Any, ...] = get_args(target_type)
            if args:
                item_type: Any = args[0]
                return cast(T, [Settings.deserialize(item, item_type) for item in data])
        if origin is tuple:
            args = get_args(target_type)
            if args and len(args) == len(data):
                return cast(T, tuple(Settings.deserialize(item, item_type) for item, item_type in zip(data, args)))
            return cast(T, tuple(data))

        if isinstance(target_type, type) and issubclass(target_type, Enum):
            return target_type[data]

        return cast(T, data)
