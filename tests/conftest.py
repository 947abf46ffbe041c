from __future__ import annotations

import base64
import io
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from PIL import Image


# Ensure `import creativegen` works when running `pytest` from repo root.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from creativegen.ad_group_loading import AdGroup  # noqa: E402
from creativegen.config import Config  # noqa: E402
from creativegen.logger import GenerationLogger  # noqa: E402


def png_b64(color: str = "red") -> str:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStateStore:
    def __init__(self, data: dict | None = None) -> None:
        self.data = dict(data or {})

    def get(self, key: str):
        return self.data.get(key)

    def set(self, key: str, value) -> None:
        self.data[key] = str(value)

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FakeAdGroupLoader:
    def __init__(self, ad_groups: list[AdGroup], keywords: dict[str, list[str]] | None = None) -> None:
        self.ad_groups = ad_groups
        self.keywords = keywords or {}
        self.keyword_calls: list[str] = []

    def list_ad_groups(self) -> list[AdGroup]:
        return list(self.ad_groups)

    def list_keywords(self, ad_group_id: str) -> list[str]:
        self.keyword_calls.append(ad_group_id)
        return list(self.keywords.get(ad_group_id, []))


class FakeImageGenerator:
    IMAGE_API_LIMIT = 4

    def __init__(self, per_call: int | None = None, responses: list[int] | None = None, on_call=None) -> None:
        # per_call: images returned per call (capped at count); None returns `count`.
        self.per_call = per_call
        self.responses = list(responses) if responses is not None else None
        self.on_call = on_call
        self.image_calls: list[tuple[str, int]] = []
        self.text_calls: list[str] = []

    def generate_images(self, prompt: str, count: int) -> list[str]:
        self.image_calls.append((prompt, count))
        if self.on_call is not None:
            self.on_call()
        if self.responses is not None:
            n = self.responses.pop(0) if self.responses else 0
        elif self.per_call is None:
            n = count
        else:
            n = min(self.per_call, count)
        return [png_b64() for _ in range(n)]

    def generate_text(self, prompt: str) -> str:
        self.text_calls.append(prompt)
        return "generated image prompt"


class FakeStorage:
    def __init__(self, existing: dict[str, int] | None = None) -> None:
        self.existing = existing or {}
        self.uploads: list[tuple[bytes, str, str]] = []
        self.count_calls: list[tuple[str, str, list[str]]] = []

    def count_images(self, customer_id: str, ad_group_id: str, subfolders) -> int:
        self.count_calls.append((customer_id, ad_group_id, list(subfolders)))
        return self.existing.get(ad_group_id, 0)

    def upload_image(self, data: bytes, filename: str, folder: str) -> str:
        self.uploads.append((data, filename, folder))
        return f"{folder}/{filename}"


class FakeScheduler:
    def __init__(self) -> None:
        self.scheduled = 0
        self.cancelled = 0

    def schedule_follow_up(self) -> None:
        self.scheduled += 1

    def cancel_pending_follow_up(self) -> None:
        self.cancelled += 1

    def is_follow_up_due(self) -> bool:
        return self.scheduled > 0


@pytest.fixture
def config() -> Config:
    cfg = Config()
    cfg.ACCOUNT_ID = "123-456-7890"
    cfg.IMAGES_PER_AD_GROUP = 2
    return cfg


@pytest.fixture
def logger() -> GenerationLogger:
    return GenerationLogger()


@pytest.fixture
def fake_openai():
    """An object shaped like the parts of the OpenAI client the generator uses."""

    class _Images:
        def __init__(self) -> None:
            self.calls: list[dict] = []
            self.data: list = []

        def generate(self, **kwargs):
            self.calls.append(kwargs)
            return SimpleNamespace(data=self.data)

    class _Responses:
        def __init__(self) -> None:
            self.calls: list[dict] = []
            self.output_text = ""

        def create(self, **kwargs):
            self.calls.append(kwargs)
            return SimpleNamespace(output_text=self.output_text)

    return SimpleNamespace(images=_Images(), responses=_Responses())
