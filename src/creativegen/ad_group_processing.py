import time

from .ad_group_loading import AdGroup, AdGroupLoader
from .config import Config
from .image_generation import ImageGenerator
from .image_processing import ImageProcessor
from .logger import GenerationLogger
from .prompt_generation import create_prompt_strategy
from .state import FollowUpScheduler, YamlStateStore
from .storage import create_storage

LAST_PROCESSED_AD_GROUP_KEY = "last_image_generation_processed_ad_group_id"
START_TIME_KEY = "image_generation_service_start_time"

# Google Ads file names can be up to 128 characters long.
FILE_NAME_LIMIT = 128

MAX_TRIES = 3


class AdGroupProcessor:
    """Generates images for every ad group that has fewer than IMAGES_PER_AD_GROUP of them."""

    def __init__(
        self,
        config: Config = None,
        logger: GenerationLogger = None,
        *,
        ad_group_loader=None,
        image_generator=None,
        image_processor=None,
        storage=None,
        state_store=None,
        scheduler=None,
        clock=time.time,
    ):
        self.config = config or Config()
        self.logger = logger or GenerationLogger()
        self.clock = clock

        # Initialize components
        self.ad_group_loader = ad_group_loader or AdGroupLoader(self.config, self.logger)
        self.image_generator = image_generator or ImageGenerator(self.config, self.logger)
        self.image_processor = image_processor or ImageProcessor(self.config, self.logger)
        self.storage = storage or create_storage(self.config, self.logger)
        self.state_store = state_store or YamlStateStore(self.config.STATE_FILE)
        self.scheduler = scheduler or FollowUpScheduler(
            self.state_store, clock=self.clock, delay_seconds=self.config.FOLLOW_UP_DELAY_SECONDS
        )
        self.prompt_strategy = create_prompt_strategy(
            self.config, self.logger, self.ad_group_loader, self.image_generator
        )

    def triggered_run(self):
        """Entry point for scheduled runs, resumes after the last processed ad group."""
        self.state_store.set(START_TIME_KEY, self.clock())
        self.run()

    def manually_run(self):
        """Entry point for manual runs, always starts from the first ad group."""
        self.state_store.set(START_TIME_KEY, self.clock())
        if self.state_store.get(LAST_PROCESSED_AD_GROUP_KEY):
            self.state_store.delete(LAST_PROCESSED_AD_GROUP_KEY)
            self.logger.info("Cleared last processed ad group ID for a fresh manual run.")
        self.run()

    def run(self):
        self.scheduler.cancel_pending_follow_up()
        ad_groups = self.ad_group_loader.list_ad_groups()

        start_index = self._get_start_index(ad_groups)

        for ad_group in ad_groups[start_index:]:
            if self.should_terminate():
                self.logger.info(
                    f"The run is reaching its {self.config.MAX_EXECUTION_SECONDS}s time budget, scheduling a "
                    f"follow-up run from ad group {ad_group.name} ({ad_group.id}) and stopping."
                )
                self.state_store.set(LAST_PROCESSED_AD_GROUP_KEY, ad_group.id)
                self.scheduler.schedule_follow_up()
                return

            self.process_ad_group(ad_group)
            self.state_store.set(LAST_PROCESSED_AD_GROUP_KEY, ad_group.id)

        self.logger.info("Finished generating.")
        self.state_store.delete(LAST_PROCESSED_AD_GROUP_KEY)
        self.scheduler.cancel_pending_follow_up()

    def process_ad_group(self, ad_group: AdGroup):
        """Generate and upload the images an ad group is missing."""
        self.logger.info(f"Processing ad group {ad_group.name} ({ad_group.id})...")

        existing_img_count = self.storage.count_images(
            ad_group.customer_id, ad_group.id, self.config.existing_image_dirs
        )
        if existing_img_count >= self.config.IMAGES_PER_AD_GROUP:
            self.logger.info(f"Ad group {ad_group.name} ({ad_group.id}) has enough generated images, skipping...")
            return

        ad_group_img_count = self.config.IMAGES_PER_AD_GROUP - existing_img_count
        self.logger.info(f"Generating {ad_group_img_count} images for {ad_group.name} ({ad_group.id})...")

        generated_images = 0
        num_tries = 0
        # Batches of at most IMAGE_API_LIMIT images
        while generated_images < ad_group_img_count and num_tries <= MAX_TRIES:
            img_count = min(self.image_generator.IMAGE_API_LIMIT, ad_group_img_count - generated_images)

            img_prompt = self.prompt_strategy.build(ad_group)
            if img_prompt is None:
                return

            if self.config.IMAGE_PROMPT_SUFFIX:
                img_prompt += " " + self.config.IMAGE_PROMPT_SUFFIX

            self.logger.info(f'Image prompt for ad group {ad_group.name}: "{img_prompt}"')
            images = self.image_generator.generate_images(img_prompt, img_count)
            self.logger.info(f"Received {len(images)} images for {ad_group.name} ({ad_group.id})...")

            if not images:
                num_tries += 1
                continue

            folder = f"{ad_group.customer_id}/{ad_group.id}/{self.config.GENERATED_DIR}"
            for image in images:
                filename = self.generate_image_file_name(ad_group.id, ad_group.name)
                self.storage.upload_image(self.image_processor.decode_image(image), filename, folder)

            generated_images += len(images)

        if generated_images < ad_group_img_count:
            self.logger.warning(
                f"Gave up on ad group {ad_group.name} ({ad_group.id}) after {num_tries} empty responses, "
                f"generated {generated_images}/{ad_group_img_count} images"
            )

    def should_terminate(self) -> bool:
        """True once the run has used up MAX_EXECUTION_SECONDS."""
        start_time = self.state_store.get(START_TIME_KEY)
        if start_time is None:
            self.state_store.set(START_TIME_KEY, self.clock())
            return False
        return self.clock() - float(start_time) > self.config.MAX_EXECUTION_SECONDS

    def generate_image_file_name(self, ad_group_id, ad_group_name: str) -> str:
        """
        Create the image file name.

        The result takes the form `adGroupId|adGroupName|timestamp` and is at
        most 128 characters long; long ad group names are trimmed to fit.
        """
        # Slashes would be read as folders in the storage path
        ad_group_name = ad_group_name.replace("/", "")
        now = str(self._now_millis())
        # The two | separators
        extra_chars = 2
        ad_group_name_limit = FILE_NAME_LIMIT - len(now) - len(str(ad_group_id)) - extra_chars
        trimmed_ad_group_name = ad_group_name[: max(ad_group_name_limit, 0)]
        return f"{ad_group_id}|{trimmed_ad_group_name}|{self._now_millis()}"

    def _get_start_index(self, ad_groups) -> int:
        last_processed_id = self.state_store.get(LAST_PROCESSED_AD_GROUP_KEY)
        if not last_processed_id:
            return 0

        for index, ad_group in enumerate(ad_groups):
            if ad_group.id == last_processed_id:
                self.logger.info(f"Resuming from ad group {ad_group.name} ({ad_group.id})")
                return index

        self.logger.warning(
            f"Last processed ad group {last_processed_id} no longer exists, starting from the first ad group"
        )
        return 0

    def _now_millis(self) -> int:
        return int(self.clock() * 1000)
