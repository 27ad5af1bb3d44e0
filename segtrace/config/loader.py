"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import SegTraceConfig

# Environment variable naming a config file, used when no --config is given
CONFIG_ENV_VAR = "SEGTRACE_CONFIG"

_ENV_REF = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _candidate_paths(cli_path: str | None) -> list[tuple[Path, bool]]:
    """Config files to try, in priority order, each flagged as explicit or not."""
    explicit = cli_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return [(Path(explicit).expanduser(), True)]
    return [
        (Path("./segtrace.yaml"), False),
        (Path.home() / ".segtrace" / "config.yaml", False),
    ]


def _read_config(path: Path) -> SegTraceConfig | None:
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: expected a mapping")
    try:
        return SegTraceConfig(**_expand_env_vars(raw))
    except ValidationError as e:
        raise ValueError(f"Invalid config in {path}: {e}") from e


def load_config(cli_path: str | None = None) -> SegTraceConfig:
    """Load config with resolution order:
    CLI > $SEGTRACE_CONFIG > project-local > user-global > defaults.

    A file named explicitly (by --config or SEGTRACE_CONFIG) must exist; the
    project-local and user-global files are optional.
    """
    for path, explicit in _candidate_paths(cli_path):
        if not path.is_file():
            if explicit:
                raise ValueError(f"Config file not found: {path}")
            continue
        config = _read_config(path)
        if config is not None:
            return config
    return SegTraceConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} and ${VAR:-default} references in strings."""
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `segtrace config init`
DEFAULT_CONFIG_TEMPLATE = """\
# segtrace.yaml

# Trace persistence
traces:
  traces_dir: "traces"             # traces of file P live at <traces_dir>/P<trace_suffix>
  trace_suffix: ".traces"
  manifest_name: "tracedFiles.json"
  guidances_name: "guidances.json"
  # indent: 2                      # pretty-print persisted traces

# Generated artifact
output:
  base_dir: "."

# Hosting service
vcs:
  provider: "github"
  token_env: "GITHUB_TOKEN"
  organization: ""
  default_branch: "main"
  commit_message: "Code regeneration/Model synchronization"

# Logging
log_level: "info"                  # debug | info | warn | error
log_format: "text"                 # text | json
"""
