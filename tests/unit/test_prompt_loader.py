from pathlib import Path

import pytest

from discharge_pipeline.simplification.exceptions import GenerationError
from discharge_pipeline.simplification.prompt_loader import (
    load_system_prompt,
    load_user_prompt_template,
)


class TestLoadSystemPrompt:
    def test_loads_bundled_prompt(self) -> None:
        assert "discharge" in load_system_prompt().lower()

    def test_loads_custom_path(self, tmp_path: Path) -> None:
        path = tmp_path / "system.txt"
        path.write_text("custom system", encoding="utf-8")
        assert load_system_prompt(path) == "custom system"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(GenerationError, match="system prompt"):
            load_system_prompt(tmp_path / "missing.txt")


class TestLoadUserPromptTemplate:
    def test_bundled_template_has_placeholders(self) -> None:
        template = load_user_prompt_template()
        for placeholder in (
            "{file_name}",
            "{document_type_instructions}",
            "{sections_to_output}",
            "{content}",
        ):
            assert placeholder in template

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(GenerationError, match="user prompt"):
            load_user_prompt_template(tmp_path / "missing.txt")
