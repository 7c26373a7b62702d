"""Whisper language options."""

from __future__ import annotations

from pydantic import BaseModel


class LanguageOption(BaseModel):
    code: str  # '' means auto-detect
    display_name: str

    model_config = {'frozen': True}

    @property
    def is_auto(self) -> bool:
        return not self.code

    @property
    def whisper_language_code(self) -> str | None:
        return None if self.is_auto else self.code


AUTO_DETECT = LanguageOption(code='', display_name='Auto (Detect Language)')

_LANGUAGES: dict[str, str] = {
    'af': 'Afrikaans', 'sq': 'Albanian', 'am': 'Amharic', 'ar': 'Arabic', 'hy': 'Armenian',
    'as': 'Assamese', 'az': 'Azerbaijani', 'ba': 'Bashkir', 'eu': 'Basque', 'be': 'Belarusian',
    'bn': 'Bengali', 'bs': 'Bosnian', 'br': 'Breton', 'bg': 'Bulgarian', 'ca': 'Catalan',
    'zh': 'Chinese', 'hr': 'Croatian', 'cs': 'Czech', 'da': 'Danish', 'nl': 'Dutch',
    'en': 'English', 'et': 'Estonian', 'fo': 'Faroese', 'fi': 'Finnish', 'fr': 'French',
    'gl': 'Galician', 'ka': 'Georgian', 'de': 'German', 'el': 'Greek', 'gu': 'Gujarati',
    'ht': 'Haitian Creole', 'ha': 'Hausa', 'haw': 'Hawaiian', 'he': 'Hebrew', 'hi': 'Hindi',
    'hu': 'Hungarian', 'is': 'Icelandic', 'id': 'Indonesian', 'it': 'Italian', 'ja': 'Japanese',
    'jw': 'Javanese', 'kn': 'Kannada', 'kk': 'Kazakh', 'km': 'Khmer', 'ko': 'Korean',
    'la': 'Latin', 'lv': 'Latvian', 'ln': 'Lingala', 'lt': 'Lithuanian', 'lb': 'Luxembourgish',
    'mk': 'Macedonian', 'mg': 'Malagasy', 'ms': 'Malay', 'ml': 'Malayalam', 'mt': 'Maltese',
    'mi': 'Maori', 'mr': 'Marathi', 'mn': 'Mongolian', 'my': 'Myanmar', 'ne': 'Nepali',
    'no': 'Norwegian', 'nn': 'Nynorsk', 'oc': 'Occitan', 'ps': 'Pashto', 'fa': 'Persian',
    'pl': 'Polish', 'pt': 'Portuguese', 'pa': 'Punjabi', 'ro': 'Romanian', 'ru': 'Russian',
    'sa': 'Sanskrit', 'sr': 'Serbian', 'sn': 'Shona', 'sd': 'Sindhi', 'si': 'Sinhala',
    'sk': 'Slovak', 'sl': 'Slovenian', 'so': 'Somali', 'es': 'Spanish', 'su': 'Sundanese',
    'sw': 'Swahili', 'sv': 'Swedish', 'tl': 'Tagalog', 'tg': 'Tajik', 'ta': 'Tamil',
    'tt': 'Tatar', 'te': 'Telugu', 'th': 'Thai', 'bo': 'Tibetan', 'tr': 'Turkish',
    'tk': 'Turkmen', 'uk': 'Ukrainian', 'ur': 'Urdu', 'uz': 'Uzbek', 'vi': 'Vietnamese',
    'cy': 'Welsh', 'yi': 'Yiddish', 'yo': 'Yoruba',
}  # fmt: skip


def all_languages() -> list[LanguageOption]:
    """Auto-detect first, then every supported language sorted by display name."""
    named = sorted(
        (LanguageOption(code=code, display_name=name) for code, name in _LANGUAGES.items()),
        key=lambda opt: opt.display_name.casefold(),
    )
    return [AUTO_DETECT, *named]


def is_supported_language(code: str) -> bool:
    return code.lower() in _LANGUAGES


def find_language(code: str) -> LanguageOption | None:
    """Look up a language by code; ``''`` and ``'auto'`` select auto-detect."""
    code = code.strip().lower()
    if code in ('', 'auto'):
        return AUTO_DETECT
    if not is_supported_language(code):
        return None
    return LanguageOption(code=code, display_name=_LANGUAGES[code])
