"""Configuration management using pydantic-settings.

Loads from environment variables and .env file.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Attributes:
        gemini_api_key: API key for the Gemini generative model service.
        gemini_base_url: Base URL of the Gemini REST API.
        edit_model: Model used for every image-to-image edit.
        text_model: Model used for JSON analysis and translation.
        imagen_model: Model used for text-to-image generation.
        request_timeout: HTTP timeout for model calls in seconds.
        batch_concurrency: Number of batch jobs processed at once.
        prompt_history_limit: Maximum number of remembered prompts.
        variation_count: Number of variations generated per request.
        device_pixel_ratio: Pixel ratio applied when rendering crops.
        storage_path: JSON file backing the key-value store.
        output_dir: Default directory for saved images and archives.
        debug: Enable debug mode.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_json: Output logs in JSON format for production.

    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gemini
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    edit_model: str = "gemini-2.5-flash-image-preview"
    text_model: str = "gemini-2.5-flash"
    imagen_model: str = "imagen-4.0-generate-001"
    request_timeout: int = 120

    # Editing
    batch_concurrency: int = 3
    prompt_history_limit: int = 20
    variation_count: int = 4
    device_pixel_ratio: float = 1.0

    # Paths
    storage_path: str = "./data/pixshop.json"
    output_dir: str = "./output"

    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def storage_file(self) -> Path:
        """Return the key-value store file as a Path object.

        Returns:
            Path: Resolved path to the JSON store file.

        """
        return Path(self.storage_path)

    @property
    def output_path(self) -> Path:
        """Return the output directory as a Path object.

        Returns:
            Path: Resolved path to the output directory.

        """
        return Path(self.output_dir)


# Global settings instance
settings = Settings()
