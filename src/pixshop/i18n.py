"""
UI strings and model-backed translation.

English is built in. Other languages are produced by the model once, checked
for lost keys or placeholders, and cached in the key-value store.
"""

import re

from loguru import logger

from .errors import MalformedResponseError
from .models.base import ImageModel
from .storage import KeyValueStore

LANGUAGE_KEY = "ui_language"
TRANSLATION_CACHE_PREFIX = "translated_ui_"

LANGUAGES = {
    "en": "English",
    "es": "Español",
    "fr": "Français",
    "de": "Deutsch",
    "it": "Italiano",
    "pt": "Português",
    "ja": "日本語",
    "ko": "한국어",
    "zh": "中文",
    "hi": "हिन्दी",
}

ENGLISH_STRINGS: dict[str, str] = {
    "appTitle": "Pixshop Studio",
    "loadingMagic": "AI is working its magic...",
    "loadingLocalizedEdit": "Performing localized edit...",
    "loadingLassoEdit": "Applying edit to selected area...",
    "loadingGeneratingImage": "AI is generating your image...",
    "loadingFilter": "Applying creative filter...",
    "loadingAdjustment": "Applying adjustment...",
    "loadingRemoveBg": "Removing background...",
    "loadingUpscale": "Upscaling image...",
    "loadingExpand": "Expanding canvas with AI...",
    "loadingStyleTransfer": "Applying artistic style...",
    "loadingPreset": "Applying preset... (Step {currentStep}/{totalSteps})",
    "loadingTranslating": "Translating to {languageName}...",
    "loadingVariations": "Generating creative variations...",
    "loadingAnalyzingForVariations": "Analyzing image to create variations...",
    "errorOccurred": "An Error Occurred",
    "errorTryAgain": "Try Again",
    "undo": "Undo",
    "redo": "Redo",
    "reset": "Reset",
    "exitEditor": "Exit Editor",
    "downloadImage": "Download Image",
    "presetsSave": "Save",
    "presetsApply": "Apply",
    "presetsDelete": "Delete",
    "presetsNone": "You have no saved presets.",
    "batchProcess": "Process {count} Images",
    "batchProcessing": "Processing...",
    "batchDownloadAll": "Download All (.zip)",
}

_PLACEHOLDER = re.compile(r"\{[A-Za-z_][A-Za-z0-9_]*\}")


def ui_string(strings: dict[str, str], key: str, **values: object) -> str:
    """Look up a UI string and fill its ``{placeholder}`` tokens."""
    text = strings.get(key) or ENGLISH_STRINGS.get(key, key)
    for name, value in values.items():
        text = text.replace("{" + name + "}", str(value))
    return text


def placeholders(text: str) -> set[str]:
    return set(_PLACEHOLDER.findall(text))


def validate_translation(source: dict[str, str], translated: dict) -> dict[str, str]:
    """
    Check that a translated table kept every key and placeholder.

    Raises:
        MalformedResponseError: If a key is missing, a value is not a string,
            or a placeholder was lost or altered
    """
    missing = [key for key in source if key not in translated]
    if missing:
        raise MalformedResponseError(f"Translation is missing keys: {', '.join(missing[:5])}")

    checked = {}
    for key, text in source.items():
        value = translated[key]
        if not isinstance(value, str):
            raise MalformedResponseError(f"Translation for '{key}' is not a string")
        if placeholders(value) != placeholders(text):
            raise MalformedResponseError(f"Translation for '{key}' changed its placeholders")
        checked[key] = value
    return checked


class Translator:
    """Switches the UI language, caching model translations.

    ``language`` starts as the language saved by a previous run; the string
    table stays English until ``restore`` or ``change_language`` loads it.
    """

    def __init__(self, model: ImageModel | None, store: KeyValueStore):
        self.model = model
        self.store = store
        self.language = store.get(LANGUAGE_KEY) or "en"
        self.strings: dict[str, str] = dict(ENGLISH_STRINGS)

    async def change_language(self, code: str) -> dict[str, str]:
        """
        Switch to a language and return its string table.

        Raises:
            MalformedResponseError: If the model's translation is unusable
            ValueError: If a translation is needed but no model is configured
        """
        if code == "en":
            if self.language != "en":
                self.store.remove(f"{TRANSLATION_CACHE_PREFIX}{self.language}")
            self.strings = dict(ENGLISH_STRINGS)
            self.language = "en"
            self.store.set(LANGUAGE_KEY, "en")
            return self.strings

        cache_key = f"{TRANSLATION_CACHE_PREFIX}{code}"
        cached = self.store.get(cache_key)
        if isinstance(cached, dict):
            logger.debug("Using cached translation for {}", code)
            translated = cached
        else:
            if self.model is None:
                raise ValueError("A model is required to translate the UI")
            logger.info("Translating UI to {} ({})", LANGUAGES.get(code, code), code)
            translated = validate_translation(
                ENGLISH_STRINGS, await self.model.translate(ENGLISH_STRINGS, code)
            )
            self.store.set(cache_key, translated)

        self.strings = {**ENGLISH_STRINGS, **translated}
        self.language = code
        self.store.set(LANGUAGE_KEY, code)
        return self.strings

    async def restore(self) -> dict[str, str]:
        """Re-apply the language saved by a previous run."""
        saved = self.store.get(LANGUAGE_KEY)
        if saved and saved != "en":
            return await self.change_language(saved)
        return self.strings
