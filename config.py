"""
Configuration management for the Exam Extractor
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Application Configuration
    app_name: str = "Life in the UK Exam Extractor"
    app_version: str = "1.0.0"
    environment: str = "development"

    # Input / Output Configuration
    input_dir: str = "./exams"
    text_dir: str = "./txt_exams"
    output_dir: str = "."
    questions_filename: str = "questions.csv"
    answers_filename: str = "answers.csv"
    file_encoding: str = "utf-8"

    # Exam identity is the first group of these patterns
    document_pattern: str = r"^Exam_(\d+)\.docx$"
    text_pattern: str = r"^Exam_(\d+)\.txt$"

    # Parsing Configuration
    recover_unnumbered_questions: bool = False
    expected_questions_per_exam: int = 24

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "simple"
    log_file: Optional[str] = None


# Global settings instance
settings = Settings()
