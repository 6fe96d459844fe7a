"""
Simulation file loader.

Reads simulation.yaml, validates it against the schema, and anchors
relative output paths to the directory of the file so a run writes to the
same place whatever the working directory is.
"""

import logging
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from sigtrace.config.schema import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationLoadError(Exception):
    """Error loading or parsing a simulation file."""

    pass


def _describe_location(loc: tuple, raw: dict) -> str:
    """
    Render a validation error location.

    Scene objects are identified by index plus their name or tag, e.g.
    ``scene.objects[3] 'tree-stand': min_corner.x``. The discriminator
    step pydantic inserts (the object type) is dropped.
    """
    if len(loc) >= 3 and loc[:2] == ("scene", "objects") and isinstance(loc[2], int):
        index = loc[2]
        rest = list(loc[3:])
        try:
            obj = raw["scene"]["objects"][index]
        except (KeyError, IndexError, TypeError):
            obj = None
        label = f"scene.objects[{index}]"
        if isinstance(obj, dict):
            if rest and rest[0] == obj.get("type"):
                rest = rest[1:]
            ident = obj.get("name") or obj.get("tag")
            if ident:
                label += f" {ident!r}"
        return f"{label}: {'.'.join(str(x) for x in rest)}" if rest else label
    return ".".join(str(x) for x in loc)


class SimulationLoader:
    """Load a SimulationConfig from a YAML file."""

    def __init__(self, config_path: Union[str, Path]):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise SimulationLoadError(f"Simulation file not found: {config_path}")
        if not self.config_path.is_file():
            raise SimulationLoadError(f"Not a file: {config_path}")

    def _read(self) -> Any:
        try:
            with open(self.config_path) as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SimulationLoadError(f"YAML parse error in {self.config_path}: {e}") from e

    def _anchor_output(self, config: SimulationConfig) -> SimulationConfig:
        base = Path(config.output.base_dir).expanduser()
        if base.is_absolute():
            return config
        resolved = (self.config_path.parent / base).resolve()
        logger.debug("Output base %s resolved to %s", config.output.base_dir, resolved)
        output = config.output.model_copy(update={"base_dir": str(resolved)})
        return config.model_copy(update={"output": output})

    def load(self) -> SimulationConfig:
        """
        Load and validate the simulation.

        Returns:
            SimulationConfig whose output.base_dir is absolute

        Raises:
            SimulationLoadError: If the file cannot be parsed or validation fails
        """
        raw = self._read()
        if not isinstance(raw, dict):
            raise SimulationLoadError("Simulation file must contain a YAML mapping")

        try:
            config = SimulationConfig.model_validate(raw)
        except ValidationError as e:
            lines = [
                f"  {_describe_location(tuple(err['loc']), raw)}: {err['msg']}"
                for err in e.errors()
            ]
            raise SimulationLoadError(
                "Simulation validation failed:\n" + "\n".join(lines)
            ) from e

        return self._anchor_output(config)


def load_simulation(path: Union[str, Path]) -> SimulationConfig:
    """Load and validate a simulation file (see SimulationLoader)."""
    return SimulationLoader(path).load()
