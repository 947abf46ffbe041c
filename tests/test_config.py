from __future__ import annotations

from pathlib import Path

import pytest

from creativegen.config import Config, ConfigError, GenerationMode


def test_defaults() -> None:
    config = Config()
    assert config.GENERATION_MODE is GenerationMode.AD_GROUP
    assert config.existing_image_dirs == ["generated", "uploaded", "validated"]


def test_from_yaml_overrides_options(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "\n".join(
            [
                "account_id: 123-456-7890",
                "generation_mode: keywords",
                "images_per_ad_group: '8'",
                "image_prompt: A photo of ${product}",
                "image_prompt_suffix:",
                "gcs_bucket: my-bucket",
            ]
        )
    )

    config = Config.from_yaml(str(path))

    assert config.ACCOUNT_ID == "123-456-7890"
    assert config.GENERATION_MODE is GenerationMode.KEYWORDS
    assert config.IMAGES_PER_AD_GROUP == 8
    assert config.IMAGE_PROMPT == "A photo of ${product}"
    assert config.IMAGE_PROMPT_SUFFIX == ""
    assert config.GCS_BUCKET == "my-bucket"
    # class defaults are untouched
    assert Config.IMAGES_PER_AD_GROUP == 4


def test_from_yaml_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert Config.from_yaml(str(path)).IMAGES_PER_AD_GROUP == Config.IMAGES_PER_AD_GROUP


@pytest.mark.parametrize(
    "content",
    [
        "unknown_option: 1",
        "generation_mode: BANNERS",
        "images_per_ad_group: many",
        "- just\n- a list",
        "key: [unclosed",
    ],
)
def test_from_yaml_rejects_bad_config(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(ConfigError):
        Config.from_yaml(str(path))


def test_from_yaml_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        Config.from_yaml(str(tmp_path / "missing.yaml"))
