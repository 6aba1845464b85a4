from functools import lru_cache
from pathlib import Path

from newsdesk.inference.exceptions import InferenceError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


@lru_cache(maxsize=None)
def load_prompt(name: str, prompt_dir: Path = _DEFAULT_PROMPT_DIR) -> str:
    """Load a bundled prompt template, e.g. load_prompt("transcription").

    Raises:
        InferenceError: if the file cannot be read.
    """
    path = prompt_dir / f"{name}_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InferenceError(f"Failed to load prompt template: {exc}") from exc


@lru_cache(maxsize=None)
def load_json_schema(name: str, prompt_dir: Path = _DEFAULT_PROMPT_DIR) -> str:
    """Load a bundled JSON schema, e.g. load_json_schema("fact_check").

    Raises:
        InferenceError: if the file cannot be read.
    """
    path = prompt_dir / f"{name}_schema.json"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InferenceError(f"Failed to load JSON schema: {exc}") from exc
