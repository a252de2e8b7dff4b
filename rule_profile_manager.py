import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

import file_utils
from trading_rules import TradingRule

LOGGER = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = file_utils.data_path("schemas", "trading_rules.schema.json")


class RuleProfileManager:
    """
    Finds, validates and loads JSON trading rule profiles.

    Profiles are looked up in the local user dir, the global user dir,
    presets/<CONFIG_ENV> and finally presets/, first match wins.
    """

    def __init__(
        self,
        config_dir: str = "rule_profiles",
        default_profile: str = "default",
        global_user_dir: Optional[Path] = None,
        schema_path: Optional[Path] = None,
    ):
        self.config_dir = Path(config_dir)
        self.default_profile = default_profile
        self.schema_path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH
        self.local_user_dir = self.config_dir / "user"
        self.global_user_dir = (
            Path(global_user_dir)
            if global_user_dir
            else Path.home() / ".config" / "trade-journal-analytics" / "rule_profiles"
        )
        self.active_profile_file = self.config_dir / "active_profile.json"
        self.env = os.environ.get("CONFIG_ENV")
        self.profile_cache: Dict[str, Dict[str, Any]] = {}
        self.schema = self._load_schema()

    def _load_schema(self) -> Dict[str, Any]:
        try:
            with open(self.schema_path, "r", encoding="utf-8") as schema_file:
                return json.load(schema_file)
        except FileNotFoundError:
            LOGGER.warning("Trading rules schema not found at %s", self.schema_path)
            return {}

    def _read_active_profile(self) -> Optional[str]:
        if not self.active_profile_file.exists():
            return None
        try:
            with open(self.active_profile_file, "r", encoding="utf-8") as active_file:
                payload = json.load(active_file)
            return payload.get("name")
        except (OSError, ValueError) as exc:
            LOGGER.warning("Failed to read active profile override: %s", exc)
            return None

    def _validate(self, payload: Dict[str, Any], profile_name: str) -> None:
        if not self.schema:
            return
        try:
            jsonschema.validate(instance=payload, schema=self.schema)
        except jsonschema.ValidationError as exc:
            LOGGER.warning("Rule profile '%s' failed validation: %s", profile_name, exc.message)
            raise ValueError(
                f"Rule profile '{profile_name}' failed schema validation: {exc.message}"
            ) from exc

    def _search_dirs(self) -> List[tuple]:
        directories = [
            ("local_user", self.local_user_dir),
            ("global_user", self.global_user_dir),
        ]
        if self.env:
            directories.append(("env_presets", self.config_dir / "presets" / self.env))
        directories.append(("repo_presets", self.config_dir / "presets"))
        return directories

    def _find_profile_path(self, profile_name: str) -> Optional[Path]:
        candidate = Path(profile_name)
        if candidate.suffix == ".json" and candidate.exists():
            return candidate

        name = f"{candidate.name}.json" if candidate.suffix == "" else candidate.name
        for _, parent in self._search_dirs():
            candidate_path = parent / name
            if candidate_path.exists():
                return candidate_path
        return None

    def get_active_profile_name(self) -> str:
        return (
            os.environ.get("TRADING_RULES_PROFILE")
            or self._read_active_profile()
            or self.default_profile
        )

    def load_profile(self, profile_name: Optional[str] = None) -> Dict[str, Any]:
        resolved_name = profile_name or self.get_active_profile_name()
        if resolved_name in self.profile_cache:
            return self.profile_cache[resolved_name]

        path = self._find_profile_path(resolved_name)
        if not path:
            raise FileNotFoundError(f"Rule profile '{resolved_name}' not found")
        with open(path, "r", encoding="utf-8") as profile_file:
            profile = json.load(profile_file)
        self._validate(profile, resolved_name)
        self.profile_cache[resolved_name] = profile
        return profile

    def load_rules(self, profile_name: Optional[str] = None) -> List[TradingRule]:
        profile = self.load_profile(profile_name)
        return [TradingRule.from_dict(rule) for rule in profile.get("rules", [])]

    def validate_profile(self, profile_name: str) -> None:
        self.profile_cache.pop(profile_name, None)
        self.load_profile(profile_name)

    def list_profiles(self) -> List[Dict[str, str]]:
        results: List[Dict[str, str]] = []
        seen: set = set()
        for source, directory in self._search_dirs():
            if not directory.exists():
                continue
            for candidate in sorted(directory.glob("*.json")):
                name = candidate.stem
                if name in seen:
                    continue
                seen.add(name)
                results.append(
                    {"name": name, "source": source, "path": str(candidate.resolve())}
                )
        return results

    def set_active_profile(self, profile_name: str) -> None:
        if not self._find_profile_path(profile_name):
            raise FileNotFoundError(f"Rule profile '{profile_name}' not found")
        self.active_profile_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.active_profile_file, "w", encoding="utf-8") as handle:
            json.dump({"name": profile_name}, handle)

    def clear_active_profile(self) -> None:
        if self.active_profile_file.exists():
            self.active_profile_file.unlink()
