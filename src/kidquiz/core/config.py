"""Configuration loading for kidquiz.

The TOML file is merged over in-code defaults (unknown keys are rejected) and
then validated into frozen dataclasses. Every section is optional, so an
empty file, or no file at all, yields the stock configuration.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - should never happen
    raise RuntimeError("Python 3.11+ required for tomllib support") from exc

__all__ = [
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_NAME",
    "ConfigError",
    "GenerationConfig",
    "KidQuizConfig",
    "LoggingConfig",
    "PolicyConfig",
    "config_template",
    "default_tree",
    "load_config",
    "resolve_config_path",
    "write_template",
]

CONFIG_PATH_ENV = "KIDQUIZ_CONFIG"
DEFAULT_CONFIG_NAME = "kidquiz.toml"

_QUESTION_TYPES = {
    "multiple_choice",
    "true_false",
    "yes_no",
    "fill_blank",
    "voice_input",
}


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class StorageConfig:
    data_dir: Path


@dataclass(frozen=True)
class GenerationConfig:
    model: str
    temperature: float
    max_tokens: int
    api_base: Optional[str]
    request_timeout_seconds: int


@dataclass(frozen=True)
class TranscriptionConfig:
    model: str
    language: str


@dataclass(frozen=True)
class SessionConfig:
    question_limit: int


@dataclass(frozen=True)
class SafetyConfig:
    extra_terms: tuple[str, ...]


@dataclass(frozen=True)
class PolicyConfig:
    batch_size: int
    question_types: tuple[str, ...]
    keywords: tuple[str, ...]
    answer_language: Optional[str]
    screen_generated: bool
    screen_fallback: bool


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool
    log_dir: Optional[Path]


@dataclass(frozen=True)
class KidQuizConfig:
    storage: StorageConfig
    generation: GenerationConfig
    transcription: TranscriptionConfig
    session: SessionConfig
    safety: SafetyConfig
    policies: Mapping[str, PolicyConfig]
    logging: LoggingConfig

    @property
    def log_dir(self) -> Path:
        if self.logging.log_dir is not None:
            return self.logging.log_dir
        return self.storage.data_dir / "logs"


def _merge_dict(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    for key, value in override.items():
        dotted = f"{path}{key}"
        # Policies are open-ended: new tables start from the general policy.
        if key not in base and path == "policies.":
            base[key] = copy.deepcopy(_DEFAULTS["policies"]["general"])
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        base_value = base[key]
        if isinstance(base_value, MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted,
                        type(value).__name__,
                    )
                )
            _merge_dict(base_value, value, path=f"{dotted}.")
        else:
            base[key] = value


def _require_positive_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_float_range(
    value: Any, *, field: str, min_value: float, max_value: float
) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{field}' must be a number.")
    number = float(value)
    if not (min_value <= number <= max_value):
        raise ConfigError(
            f"'{field}' must be between {min_value} and {max_value}."
        )
    return number


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _coerce_optional_string(value: Any, *, field: str) -> Optional[str]:
    if value is None:
        return None
    return _require_string(value, field=field)


def _coerce_optional_path(value: Any, *, field: str) -> Optional[Path]:
    if value is None:
        return None
    return Path(_require_string(value, field=field)).expanduser().resolve()


def _require_string_list(value: Any, *, field: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(
        isinstance(item, str) and item.strip() for item in value
    ):
        raise ConfigError(f"'{field}' must be a list of non-empty strings.")
    return tuple(item.strip() for item in value)


def _build_storage(section: Mapping[str, Any]) -> StorageConfig:
    data_dir = _coerce_optional_path(
        section.get("data_dir"), field="storage.data_dir"
    )
    if data_dir is None:
        data_dir = (Path.home() / ".kidquiz-data").resolve()
    return StorageConfig(data_dir=data_dir)


def _build_generation(section: Mapping[str, Any]) -> GenerationConfig:
    return GenerationConfig(
        model=_require_string(section.get("model"), field="generation.model"),
        temperature=_require_float_range(
            section.get("temperature"),
            field="generation.temperature",
            min_value=0.0,
            max_value=2.0,
        ),
        max_tokens=_require_positive_int(
            section.get("max_tokens"), field="generation.max_tokens"
        ),
        api_base=_coerce_optional_string(
            section.get("api_base"), field="generation.api_base"
        ),
        request_timeout_seconds=_require_positive_int(
            section.get("request_timeout_seconds"),
            field="generation.request_timeout_seconds",
        ),
    )


def _build_transcription(section: Mapping[str, Any]) -> TranscriptionConfig:
    return TranscriptionConfig(
        model=_require_string(
            section.get("model"), field="transcription.model"
        ),
        language=_require_string(
            section.get("language"), field="transcription.language"
        ),
    )


def _build_policy(name: str, section: Mapping[str, Any]) -> PolicyConfig:
    prefix = f"policies.{name}"
    question_types = _require_string_list(
        section.get("question_types"), field=f"{prefix}.question_types"
    )
    if not question_types:
        raise ConfigError(f"'{prefix}.question_types' must not be empty.")
    unknown = sorted(set(question_types) - _QUESTION_TYPES)
    if unknown:
        raise ConfigError(
            f"'{prefix}.question_types' has unknown types: {', '.join(unknown)}."
        )
    keywords = section.get("keywords")
    return PolicyConfig(
        batch_size=_require_positive_int(
            section.get("batch_size"), field=f"{prefix}.batch_size"
        ),
        question_types=question_types,
        keywords=(
            _require_string_list(keywords, field=f"{prefix}.keywords")
            if keywords
            else ()
        ),
        answer_language=_coerce_optional_string(
            section.get("answer_language"), field=f"{prefix}.answer_language"
        ),
        screen_generated=_require_bool(
            section.get("screen_generated"),
            field=f"{prefix}.screen_generated",
        ),
        screen_fallback=_require_bool(
            section.get("screen_fallback"),
            field=f"{prefix}.screen_fallback",
        ),
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_string(section.get("level"), field="logging.level").upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if level not in allowed:
        raise ConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    return LoggingConfig(
        level=level,
        verbose=_require_bool(section.get("verbose"), field="logging.verbose"),
        log_dir=_coerce_optional_path(
            section.get("log_dir"), field="logging.log_dir"
        ),
    )


def _build_config(tree: Mapping[str, Any]) -> KidQuizConfig:
    policies = {
        name: _build_policy(name, section)
        for name, section in tree["policies"].items()
    }
    if "general" not in policies:  # pragma: no cover - defaults guarantee it
        raise ConfigError("A 'general' policy is required.")
    session = tree["session"]
    return KidQuizConfig(
        storage=_build_storage(tree["storage"]),
        generation=_build_generation(tree["generation"]),
        transcription=_build_transcription(tree["transcription"]),
        session=SessionConfig(
            question_limit=_require_positive_int(
                session.get("question_limit"),
                field="session.question_limit",
            )
        ),
        safety=SafetyConfig(
            extra_terms=_require_string_list(
                tree["safety"].get("extra_terms"), field="safety.extra_terms"
            )
            if tree["safety"].get("extra_terms")
            else ()
        ),
        policies=policies,
        logging=_build_logging(tree["logging"]),
    )


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> Optional[Path]:
    """Return the config file to load, or ``None`` to use pure defaults."""

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve()
    env_override = env_map.get(CONFIG_PATH_ENV)
    if env_override:
        return Path(env_override).expanduser().resolve()
    local = Path(DEFAULT_CONFIG_NAME).resolve()
    return local if local.exists() else None


def load_config(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> KidQuizConfig:
    """Load the TOML config, applying defaults and validation."""

    tree = default_tree()
    path = resolve_config_path(explicit_path=explicit_path, env=env)
    if path is not None:
        toml_data = _load_toml(path)
        _merge_dict(tree, toml_data)
    return _build_config(tree)


def default_tree() -> Dict[str, Any]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def config_template() -> str:
    """Return the TOML template written by ``kidquiz init``."""

    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(
    path: Path, *, overwrite: bool = False, mode: int = 0o600
) -> Path:
    """Write the default template to ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as fh:
        fh.write(config_template())
    try:
        path.chmod(mode)
    except PermissionError:
        pass
    return path


_DEFAULTS: Dict[str, Any] = {
    "storage": {
        "data_dir": None,
    },
    "generation": {
        "model": "gpt-4o-mini",
        "temperature": 0.7,
        "max_tokens": 3000,
        "api_base": None,
        "request_timeout_seconds": 60,
    },
    "transcription": {
        "model": "whisper-1",
        "language": "te",
    },
    "session": {
        "question_limit": 10,
    },
    "safety": {
        "extra_terms": [],
    },
    "policies": {
        "general": {
            "batch_size": 10,
            "question_types": [
                "multiple_choice",
                "true_false",
                "fill_blank",
                "yes_no",
            ],
            "keywords": [],
            "answer_language": None,
            "screen_generated": True,
            "screen_fallback": False,
        },
        "vocabulary": {
            "batch_size": 5,
            "question_types": ["voice_input"],
            "keywords": ["telugu"],
            "answer_language": "Telugu",
            "screen_generated": True,
            "screen_fallback": False,
        },
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
        "log_dir": None,
    },
}


_CONFIG_TEMPLATE = """
# kidquiz configuration

[storage]
# Directory holding topics.jsonl and questions.jsonl
# data_dir = "~/.kidquiz-data"

[generation]
model = "gpt-4o-mini"
# Sampling temperature (0.0-2.0)
temperature = 0.7
max_tokens = 3000
# api_base = "https://api.openai.com/v1"
request_timeout_seconds = 60

[transcription]
model = "whisper-1"
# ISO-639-1 hint passed to the speech service
language = "te"

[session]
# Maximum questions pulled into one quiz session
question_limit = 10

[safety]
# Terms added to the built-in deny-list
extra_terms = []

[policies.general]
batch_size = 10
question_types = ["multiple_choice", "true_false", "fill_blank", "yes_no"]
screen_generated = true
# Static fallback content is curated, so screening it is optional
screen_fallback = false

[policies.vocabulary]
batch_size = 5
question_types = ["voice_input"]
# New topics whose name contains one of these become vocabulary topics
keywords = ["telugu"]
answer_language = "Telugu"
screen_generated = true
screen_fallback = false

[logging]
level = "INFO"
verbose = false
# log_dir = "~/.kidquiz-data/logs"
"""
