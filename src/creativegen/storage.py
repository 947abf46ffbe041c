from abc import ABC, abstractmethod
from pathlib import Path

from google.cloud import storage

from .config import Config
from .logger import GenerationLogger


class Storage(ABC):
    """Where generated images live, laid out as {customer_id}/{ad_group_id}/{subfolder}/{file}."""

    def __init__(self, config: Config, logger: GenerationLogger):
        self.config = config
        self.logger = logger

    @abstractmethod
    def count_images(self, customer_id: str, ad_group_id: str, subfolders) -> int:
        """Number of files already stored for the ad group across the given subfolders."""

    @abstractmethod
    def upload_image(self, data: bytes, filename: str, folder: str) -> str:
        """Store PNG bytes under folder/filename and return where they ended up."""


class LocalStorage(Storage):
    """Stores images on the local filesystem under OUTPUT_DIR."""

    def __init__(self, config: Config, logger: GenerationLogger, root: str = None):
        super().__init__(config, logger)
        self.root = Path(root or config.OUTPUT_DIR)

    def count_images(self, customer_id: str, ad_group_id: str, subfolders) -> int:
        count = 0
        for subfolder in subfolders:
            folder = self.root / str(customer_id) / str(ad_group_id) / subfolder
            if folder.is_dir():
                count += sum(1 for path in folder.iterdir() if path.is_file())
        return count

    def upload_image(self, data: bytes, filename: str, folder: str) -> str:
        out_path = self.root / folder / filename
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(data)
        self.logger.info(f"Image saved: {out_path}")
        return str(out_path)


class GcsStorage(Storage):
    """Stores images in a Google Cloud Storage bucket."""

    def __init__(self, config: Config, logger: GenerationLogger, client: storage.Client = None):
        super().__init__(config, logger)
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(config.GCS_BUCKET)

    def count_images(self, customer_id: str, ad_group_id: str, subfolders) -> int:
        count = 0
        for subfolder in subfolders:
            prefix = f"{customer_id}/{ad_group_id}/{subfolder}/"
            try:
                blobs = self.client.list_blobs(self.config.GCS_BUCKET, prefix=prefix)
                count += sum(1 for blob in blobs if not blob.name.endswith("/"))
            except Exception as e:
                self.logger.error(f"Failed to list gs://{self.config.GCS_BUCKET}/{prefix}: {e}")
                raise
        return count

    def upload_image(self, data: bytes, filename: str, folder: str) -> str:
        blob_path = f"{folder}/{filename}"
        blob = self.bucket.blob(blob_path)
        try:
            blob.upload_from_string(data, content_type="image/png")
        except Exception as e:
            self.logger.error(f"Failed to upload {blob_path}: {e}")
            raise

        gcs_uri = f"gs://{self.config.GCS_BUCKET}/{blob_path}"
        self.logger.info(f"Image uploaded: {gcs_uri}")
        return gcs_uri


def create_storage(config: Config, logger: GenerationLogger) -> Storage:
    if config.GCS_BUCKET:
        return GcsStorage(config, logger)
    return LocalStorage(config, logger)
