from pathlib import Path

from discharge_pipeline.simplification.exceptions import GenerationError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_system_prompt(path: Path | None = None) -> str:
    """Load the fixed simplification system prompt.

    Raises:
        GenerationError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "system_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GenerationError(f"Failed to load system prompt: {exc}") from exc


def load_user_prompt_template(path: Path | None = None) -> str:
    """Load the per-call user prompt template.

    The template has ``{file_name}``, ``{document_type_instructions}``,
    ``{sections_to_output}`` and ``{content}`` placeholders.

    Raises:
        GenerationError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "user_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GenerationError(f"Failed to load user prompt template: {exc}") from exc
