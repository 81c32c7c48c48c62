"""Load agent prompts from TOML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import tomli as toml


class AgentPromptLoader:
    """Helper to resolve and load the prompts of a given agent name."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        """Initialize loader using a base directory for prompts."""
        default = Path(__file__).resolve().parent.parent / "prompts"
        self.base: Path = (base_dir or default).resolve()
        self._cache: Dict[str, Dict[str, Any]] = {}

    def _path_for(self, agent_name: str) -> Path:
        """Return the TOML file path for the given agent name."""
        return self.base / f"{agent_name}_prompt.toml"

    def _load(self, agent_name: str) -> Dict[str, Any]:
        """Read and parse the TOML prompt file for an agent."""
        if agent_name in self._cache:
            return self._cache[agent_name]
        path = self._path_for(agent_name)
        if not path.exists():
            raise FileNotFoundError(f"Prompt file not found: {path} (cwd={Path.cwd()})")
        with path.open("rb") as f:
            data: Dict[str, Any] = toml.load(f)
        self._cache[agent_name] = data
        return data

    def get_system_prompt(self, agent_name: str) -> str:
        """Return the system prompt string loaded from TOML for the agent."""
        data = self._load(agent_name)
        return (data.get("system") or data.get("system_prompt") or "").strip()

    def get_prompt(self, agent_name: str, key: str) -> str:
        """Return any other prompt template stored under ``key``."""
        return str(self._load(agent_name).get(key) or "").strip()
