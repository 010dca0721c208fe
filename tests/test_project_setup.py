"""
Tests for project setup validation
"""
import importlib
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class TestProjectSetup:
    """Test project structure and dependencies are properly configured"""

    def test_required_directories_exist(self):
        """Test that all required directories exist"""
        for dir_name in ['models', 'services', 'tests', 'utils']:
            path = PROJECT_ROOT / dir_name
            assert path.is_dir(), f"Required directory '{dir_name}' does not exist"

    def test_init_files_exist(self):
        """Test that __init__.py files exist in all Python packages"""
        for init_file in ['models/__init__.py', 'services/__init__.py', 'tests/__init__.py', 'utils/__init__.py']:
            assert (PROJECT_ROOT / init_file).exists(), f"Required __init__.py file '{init_file}' does not exist"

    def test_pyproject_declares_dependencies(self):
        """Test that pyproject.toml lists the runtime and test dependencies"""
        content = (PROJECT_ROOT / 'pyproject.toml').read_text(encoding='utf-8')

        for package in ['pydantic', 'pydantic-settings', 'python-docx', 'pytest', 'hypothesis']:
            assert f'"{package}' in content, f"Required package '{package}' not found in pyproject.toml"

    @pytest.mark.parametrize("module_name", [
        'config',
        'run',
        'models',
        'services',
        'utils.exceptions',
        'utils.logging',
    ])
    def test_modules_import(self, module_name):
        assert importlib.import_module(module_name) is not None


class TestConfiguration:
    """Test default settings"""

    def test_default_settings(self):
        from config import Settings

        settings = Settings(_env_file=None)

        assert settings.questions_filename == "questions.csv"
        assert settings.answers_filename == "answers.csv"
        assert settings.file_encoding == "utf-8"
        assert settings.recover_unnumbered_questions is False
        assert settings.expected_questions_per_exam == 24

    def test_settings_from_environment(self, monkeypatch):
        from config import Settings

        monkeypatch.setenv("OUTPUT_DIR", "/tmp/tables")
        monkeypatch.setenv("RECOVER_UNNUMBERED_QUESTIONS", "true")

        settings = Settings(_env_file=None)

        assert settings.output_dir == "/tmp/tables"
        assert settings.recover_unnumbered_questions is True

    def test_document_pattern_extracts_exam_number(self):
        import re
        from config import Settings

        pattern = re.compile(Settings(_env_file=None).document_pattern)

        assert pattern.match("Exam_12.docx").group(1) == "12"
        assert pattern.match("Exam_12.txt") is None
