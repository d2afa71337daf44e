"""Load and store enhancement parameters as JSON or YAML files."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

try:  # pragma: no cover - optional dependency
    import yaml
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None

from .params import EnhancementParams

LOGGER = logging.getLogger("image_enhancer")


def _load_config_data(path: Path) -> Mapping[str, Any]:
    """Parse a parameter file into a raw mapping.

    ``.yaml`` / ``.yml`` files go through PyYAML, anything else is read as
    JSON. An empty document yields an empty mapping.

    Raises:
        FileNotFoundError: *path* is missing.
        RuntimeError: A YAML file was given but PyYAML is not installed.
        ValueError: The document is unparsable or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"} and yaml is None:
        raise RuntimeError("YAML configuration files require the optional 'pyyaml' dependency")
    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(path.read_text())  # type: ignore[union-attr]
        else:
            data = json.loads(path.read_text())
    except Exception as exc:  # pragma: no cover - exact exception varies by backend
        raise ValueError(f"Unable to parse configuration file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Configuration file {path} must contain a mapping of option names to values")
    return data


def _normalise_config_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    normalised: dict[str, Any] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise ValueError("Configuration keys must be strings")
        normalised[key.strip().lower().replace("-", "_")] = value
    return normalised


def load_params(path: Path | str, *, clamp: bool = False) -> EnhancementParams:
    """Read an :class:`EnhancementParams` from *path*.

    Missing keys keep their neutral defaults. With ``clamp=True`` values are
    pulled into range the way a slider would; otherwise an out-of-range value
    raises :class:`~image_enhancer.buffers.InvalidInput`.
    """
    source = Path(path)
    data = _normalise_config_keys(_load_config_data(source))
    params = EnhancementParams.from_mapping(data, clamp=clamp)
    LOGGER.debug("Loaded parameters from %s: %s", source, params)
    return params


def save_params(path: Path | str, params: EnhancementParams) -> Path:
    """Write *params* to *path* as JSON (or YAML for .yaml/.yml)."""
    destination = Path(path)
    payload = params.as_dict()
    if destination.suffix.lower() in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("YAML configuration files require the optional 'pyyaml' dependency")
        text = yaml.safe_dump(payload, sort_keys=False)
    else:
        text = json.dumps(payload, indent=2) + "\n"
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text)
    LOGGER.info("Saved parameters to %s", destination)
    return destination


__all__ = ["load_params", "save_params"]
