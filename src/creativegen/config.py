from enum import Enum
from pathlib import Path

import yaml
from dotenv import load_dotenv

load_dotenv()


class ConfigError(RuntimeError):
    pass


class GenerationMode(str, Enum):
    """Where the image prompt for an ad group comes from."""

    AD_GROUP = "AD_GROUP"
    KEYWORDS = "KEYWORDS"


class Config:
    """Configuration settings for the image generation job."""

    # Google Ads
    ACCOUNT_ID = ""

    # Prompt Settings
    GENERATION_MODE = GenerationMode.AD_GROUP
    AD_GROUP_NAME_REGEX = r"(?P<product>.*)"
    IMAGE_PROMPT = "A photo of a ${product} in sharp, 4k, professional product photography"
    IMAGE_PROMPT_SUFFIX = ""
    TEXT_PROMPT_CONTEXT = "You are an expert art director writing prompts for an image generation model."
    TEXT_PROMPT = "Write a single image prompt for an ad that targets these search keywords:"
    TEXT_PROMPT_SUFFIX = ""

    # API Settings
    IMAGE_MODEL = "gpt-image-1"
    IMAGE_SIZE = "1024x1024"
    GPT_MODEL = "gpt-5-nano"

    # Quota
    IMAGES_PER_AD_GROUP = 4

    # File Structure
    OUTPUT_DIR = "results"
    GCS_BUCKET = ""
    GENERATED_DIR = "generated"
    UPLOADED_DIR = "uploaded"
    VALIDATED_DIR = "validated"
    STATE_FILE = "state.yaml"
    LOG_FILE = ""

    # Execution budget
    MAX_EXECUTION_SECONDS = 5 * 60
    FOLLOW_UP_DELAY_SECONDS = 60

    _INT_OPTIONS = ("IMAGES_PER_AD_GROUP", "MAX_EXECUTION_SECONDS", "FOLLOW_UP_DELAY_SECONDS")

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """Build a config from a YAML file, keys are the lower-case option names."""
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {path}")

        with open(config_path, "r") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Failed to parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        config = cls()
        for key, value in data.items():
            config.set_option(key, value)
        return config

    def set_option(self, key: str, value):
        name = str(key).upper()
        if name.startswith("_") or not hasattr(self, name):
            raise ConfigError(f"Unknown config option: {key}")

        if name == "GENERATION_MODE":
            value = parse_generation_mode(value)
        elif name in self._INT_OPTIONS:
            try:
                value = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid int for {key}: {value!r}") from e
        elif value is None:
            value = ""
        else:
            value = str(value)

        setattr(self, name, value)

    @property
    def existing_image_dirs(self):
        return [self.GENERATED_DIR, self.UPLOADED_DIR, self.VALIDATED_DIR]


def parse_generation_mode(value) -> GenerationMode:
    try:
        return GenerationMode(str(value).strip().upper())
    except ValueError as e:
        modes = ", ".join(m.value for m in GenerationMode)
        raise ConfigError(f"Unknown generation mode: {value!r} (expected one of {modes})") from e
