"""Normalização e validação de texto livre enviado pelos comensais."""
import re
import unicodedata
from typing import Optional

EMOJI_PATTERN = re.compile(
    "["
    "\u00a9\u00ae\u203c\u2049\u2122\u2139\u2194-\u2199\u21a9-\u21aa"
    "\u231a-\u231b\u2328\u23cf\u23e9-\u23f3\u23f8-\u23fa\u24c2"
    "\u25aa-\u25ab\u25b6\u25c0\u25fb-\u25fe\u2600-\u27bf\u2934-\u2935"
    "\u2b05-\u2b07\u2b1b-\u2b1c\u2b50\u2b55\u3030\u303d\u3297\u3299"
    "\U0001f000-\U0001faff"
    "]"
)
CONTROL_PATTERN = re.compile(r"[\x00-\x1f\x7f]")
CONTROL_EXCEPT_NEWLINE_PATTERN = re.compile(r"[\x00-\x09\x0b-\x1f\x7f]")


class TextSanitizationError(ValueError):
    """Texto com conteúdo proibido ou fora dos limites."""


def sanitize_plain_text(
    value: str,
    *,
    max_length: int,
    field_label: str = "O campo",
    allow_newlines: bool = False,
    min_length: int = 0,
) -> str:
    if not isinstance(value, str):
        raise TextSanitizationError(f"{field_label} é inválido.")

    normalized = unicodedata.normalize("NFKC", value)
    if allow_newlines:
        normalized = re.sub(r"\r\n?", "\n", normalized)
        normalized = "\n".join(line.replace("\t", " ").strip() for line in normalized.split("\n"))
    else:
        normalized = re.sub(r"\s+", " ", normalized)
    normalized = normalized.strip()

    if min_length > 0 and len(normalized) < min_length:
        raise TextSanitizationError(f"{field_label} é obrigatório.")

    if len(normalized) > max_length:
        raise TextSanitizationError(f"{field_label} deve ter no máximo {max_length} caracteres.")

    if EMOJI_PATTERN.search(normalized):
        raise TextSanitizationError(f"{field_label} não aceita emojis.")

    control = CONTROL_EXCEPT_NEWLINE_PATTERN if allow_newlines else CONTROL_PATTERN
    if control.search(normalized):
        raise TextSanitizationError(f"{field_label} contém caracteres inválidos.")

    return normalized


def sanitize_optional(
    value: Optional[str],
    *,
    max_length: int,
    field_label: str = "O campo",
    allow_newlines: bool = False,
) -> Optional[str]:
    """Como `sanitize_plain_text`, mas vazio/None vira None."""
    if not value:
        return None
    sanitized = sanitize_plain_text(
        value, max_length=max_length, field_label=field_label, allow_newlines=allow_newlines
    )
    return sanitized or None
