import re

from .ad_group_loading import AdGroup, AdGroupLoader
from .config import Config, ConfigError, GenerationMode
from .image_generation import ImageGenerator
from .logger import GenerationLogger


def get_regex_match_groups(text: str, regex):
    """For a given string and regex return the named match groups, or None if there is no match."""
    match = re.search(regex, text)
    if match is not None:
        return match.groupdict()
    return None


def create_prompt(template: str, values: dict) -> str:
    """
    Inject the values into the prompt template.

    A template can have placeholders for the keys, for example
    "A photo of a ${city} in sharp, 4k". With {"city": "London"} this
    returns "A photo of a London in sharp, 4k". Placeholders without a
    value are left as they are.
    """
    prompt = template
    for key, value in values.items():
        prompt = prompt.replace("${" + key + "}", "" if value is None else str(value))
    return prompt


class AdGroupPromptStrategy:
    """Builds the image prompt from named groups captured in the ad group name."""

    def __init__(self, config: Config, logger: GenerationLogger):
        self.config = config
        self.logger = logger
        self.regex = re.compile(config.AD_GROUP_NAME_REGEX)

    def build(self, ad_group: AdGroup):
        match_groups = get_regex_match_groups(ad_group.name, self.regex)
        if match_groups:
            return create_prompt(self.config.IMAGE_PROMPT, match_groups)

        self.logger.info(
            f"No matching groups found for {ad_group.name} with {self.regex.pattern}. Using full prompt."
        )
        return self.config.IMAGE_PROMPT


class KeywordsPromptStrategy:
    """Asks the language model for an image prompt based on the ad group keywords."""

    def __init__(
        self,
        config: Config,
        logger: GenerationLogger,
        ad_group_loader: AdGroupLoader,
        image_generator: ImageGenerator,
    ):
        self.config = config
        self.logger = logger
        self.ad_group_loader = ad_group_loader
        self.image_generator = image_generator

    def build(self, ad_group: AdGroup):
        """Return the generated prompt, or None when the ad group has no keywords."""
        keywords = list(dict.fromkeys(self.ad_group_loader.list_keywords(ad_group.id)))
        self.logger.info(f"Positive keyword list: {','.join(keywords)}")

        if not keywords:
            self.logger.info(f"Skip ad group {ad_group.id} - No positive keywords")
            return None

        text_prompt = f"{self.config.TEXT_PROMPT_CONTEXT} {self.config.TEXT_PROMPT} {','.join(keywords)}"
        if self.config.TEXT_PROMPT_SUFFIX:
            text_prompt += " " + self.config.TEXT_PROMPT_SUFFIX

        self.logger.info(f"Prompt to generate image prompt: {text_prompt}")
        return self.image_generator.generate_text(text_prompt)


def create_prompt_strategy(
    config: Config,
    logger: GenerationLogger,
    ad_group_loader: AdGroupLoader,
    image_generator: ImageGenerator,
):
    mode = config.GENERATION_MODE
    if mode == GenerationMode.AD_GROUP:
        return AdGroupPromptStrategy(config, logger)
    if mode == GenerationMode.KEYWORDS:
        return KeywordsPromptStrategy(config, logger, ad_group_loader, image_generator)

    logger.error(f"Unknown mode: {mode}")
    raise ConfigError(f"Unknown generation mode: {mode!r}")
