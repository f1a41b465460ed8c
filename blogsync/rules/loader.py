import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from blogsync.rules.models import ClientRules

ENV_API_URL = "BLOGSYNC_API_URL"
ENV_CREDENTIAL_PATH = "BLOGSYNC_CREDENTIAL_PATH"
ENV_RULES_PATH = "BLOGSYNC_RULES_PATH"


def default_rules() -> ClientRules:
    """Built-in defaults with environment overrides applied."""
    return apply_env_overrides(ClientRules())


def apply_env_overrides(rules: ClientRules) -> ClientRules:
    api_url = os.environ.get(ENV_API_URL)
    if api_url:
        rules = rules.model_copy(
            update={"api": rules.api.model_copy(update={"base_url": api_url})}
        )
    credential_path = os.environ.get(ENV_CREDENTIAL_PATH)
    if credential_path:
        rules = rules.model_copy(
            update={
                "storage": rules.storage.model_copy(
                    update={"credential_path": credential_path}
                )
            }
        )
    return rules


def load_rules(path: Path) -> ClientRules:
    """
    Load and validate the client rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    # Rules may live inside a ```yaml fence of a markdown document
    lines = content.splitlines()
    yaml_lines: list[str] = []
    in_block = False
    found_block = False

    for line in lines:
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break

        if in_block:
            yaml_lines.append(line)

    clean_content = "\n".join(yaml_lines) if found_block else content

    try:
        data = yaml.safe_load(clean_content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        rules = ClientRules.model_validate(data or {})
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e

    return apply_env_overrides(rules)


def resolve_rules(path: Path | None = None) -> ClientRules:
    """Load rules from `path`, $BLOGSYNC_RULES_PATH, or fall back to defaults."""
    if path is None:
        env_path = os.environ.get(ENV_RULES_PATH)
        if not env_path:
            return default_rules()
        path = Path(env_path)
    return load_rules(path)
