"""Key/value settings store handed to the LEAN engine.

LEAN reads all of its runtime settings (data tokens, rate limits, time loop
budgets) from a flat string-keyed configuration. The harness keeps one
``SettingsStore`` per process and rebuilds it from defaults before every
case, so an override applied for one case can never leak into the next.

Example usage:
    store = SettingsStore.from_file("Launcher/config.json")
    store.reset()
    store.set("forward-console-messages", False)
    store.get("forward-console-messages")   # "false"
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Mapping

from regression_system.core.config import ConfigurationError

# LEAN's config.json carries // comments, which json.loads rejects
_COMMENT_LINE = re.compile(r"^\s*//.*$", re.MULTILINE)


def _to_setting(value: Any) -> str:
    """Convert a value to the string form LEAN stores."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


class SettingsStore:
    """Mutable string settings with reset-to-defaults.

    Attributes:
        defaults: Settings restored by ``reset``.
    """

    def __init__(self, defaults: Mapping[str, Any] | None = None):
        self.defaults: dict[str, str] = {
            key: _to_setting(value) for key, value in (defaults or {}).items()
        }
        self._values: dict[str, str] = dict(self.defaults)

    @classmethod
    def from_file(
        cls, path: Path | str, extra: Mapping[str, Any] | None = None
    ) -> "SettingsStore":
        """Create a store seeded from a LEAN config.json.

        Args:
            path: Path to the JSON settings file.
            extra: Settings layered over the file contents.

        Raises:
            ConfigurationError: If the file can't be read or isn't a JSON object.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Error reading settings file {path}: {e}") from e

        try:
            data = json.loads(_COMMENT_LINE.sub("", text))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in settings file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {path} must contain a JSON object")

        data.update(extra or {})
        return cls(data)

    def reset(self) -> None:
        """Restore every setting to its default. Resetting twice equals resetting once."""
        self._values = dict(self.defaults)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = _to_setting(value)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._values.get(key, default)

    def get_value(self, key: str, default: Any = None) -> Any:
        """Get a setting decoded from JSON when possible.

        Settings such as ``regression-test-languages`` hold JSON arrays. Values
        that are not valid JSON come back as plain strings.
        """
        raw = self._values.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the current settings."""
        return dict(self._values)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
