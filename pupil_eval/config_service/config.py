"""Detection parameters with dotted-path get/set."""

import threading
from typing import Any, Tuple

from pupil_eval.config_service.config_modules import CoarseDetection, Confidence, RootConfig
from pupil_eval.utilities.logger_setup import setup_logger

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _coerce(value: Any, target_type: type) -> Any:
    """Convert value (often a string from a CLI or a file) to target_type."""
    if not isinstance(value, str):
        return target_type(value)

    text = value.strip()
    if target_type is bool:
        # bool("0") is True
        if text.lower() in _TRUE:
            return True
        if text.lower() in _FALSE:
            return False
        raise ValueError(f"cannot parse bool from '{value}'")
    if target_type is int:
        return int(text) if text.lstrip("-").isdigit() else int(float(text))
    return target_type(text)


class Config:
    """
    Parameters of the coarse localizer and the confidence estimators:
      - cfg.set("coarse.working_width", "80")
      - cfg.get("confidence.outline_bias") -> 5
      - cfg.coarse.min_coverage
    """
    def __init__(self, root: RootConfig | None = None) -> None:
        self.logger = setup_logger("Config")
        self._lock = threading.Lock()
        self._root = root if root is not None else RootConfig()

    @property
    def coarse(self) -> CoarseDetection:
        return self._root.coarse

    @property
    def confidence(self) -> Confidence:
        return self._root.confidence

    def get(self, path: str) -> Any:
        with self._lock:
            section, name = self._resolve(path)
            return getattr(section, name)

    def set(self, path: str, value: Any) -> bool:
        """Set a field, keeping its current type.

        Returns False (and keeps the old value) when the value cannot be
        converted. Unknown paths raise ValueError.
        """
        with self._lock:
            section, name = self._resolve(path)
            target_type = type(getattr(section, name))
            try:
                new = _coerce(value, target_type)
            except (ValueError, TypeError) as e:
                self.logger.error("Failed to set %s to %r (expected %s): %s",
                                  path, value, target_type.__name__, e)
                return False
            setattr(section, name, new)
        self.logger.debug("%s = %r", path, new)
        return True

    def _resolve(self, path: str) -> Tuple[Any, str]:
        """(section object, field name) for 'section.field'."""
        parts = path.split(".")
        if len(parts) != 2:
            self.logger.error("Config: invalid path '%s'", path)
            raise ValueError("Use dotted path like 'coarse.working_width'")

        section_name, name = parts
        section = getattr(self._root, section_name, None)
        if section is None:
            self.logger.error("Config: unknown section '%s' in '%s'", section_name, path)
            raise ValueError(f"Unknown config section '{section_name}'")
        if not hasattr(section, name):
            self.logger.error("Config: unknown field '%s'", path)
            raise ValueError(f"Unknown config field '{path}'")
        return section, name
