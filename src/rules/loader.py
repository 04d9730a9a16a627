import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.rules.models import Rules

logger = logging.getLogger(__name__)

FENCE_OPEN = "```yaml"
FENCE_CLOSE = "```"


def extract_yaml(text: str) -> str:
    """
    Return the first ```yaml fenced block of a document, or the whole text.

    Lets the rules live inside a markdown page next to their prose.
    """
    block: list[str] | None = None
    for line in text.splitlines():
        stripped = line.strip()
        if block is None:
            if stripped.startswith(FENCE_OPEN):
                block = []
            continue
        if stripped.startswith(FENCE_CLOSE):
            break
        block.append(line)
    return text if block is None else "\n".join(block)


def load_rules(path: str | Path) -> Rules:
    """
    Load and validate the site rules.

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: If the YAML or the schema is invalid
    """
    rules_path = Path(path)
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules file not found at: {rules_path}")

    source = extract_yaml(rules_path.read_text())

    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        rules = Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e

    logger.debug("Loaded rules %s (version %s)", rules.project.slug, rules.project.rules_version)
    return rules
