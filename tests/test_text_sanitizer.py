import pytest

from mesalink.core.text_sanitizer import TextSanitizationError, sanitize_optional, sanitize_plain_text


def test_collapses_whitespace_in_single_line_mode():
    assert sanitize_plain_text("  sem \t cebola \n por favor ", max_length=50) == "sem cebola por favor"


def test_keeps_newlines_in_multiline_mode():
    value = "linha 1\r\nlinha\t2  \n\n  linha 3"
    assert sanitize_plain_text(value, max_length=50, allow_newlines=True) == "linha 1\nlinha 2\n\nlinha 3"


def test_applies_nfkc_normalization():
    # Ligadura "ﬁ" e dígito de largura total viram ASCII
    assert sanitize_plain_text("ﬁno １", max_length=20) == "fino 1"


def test_rejects_emoji():
    with pytest.raises(TextSanitizationError, match="não aceita emojis"):
        sanitize_plain_text("sem cebola \U0001f922", max_length=50, field_label="Notas")


def test_rejects_pictographic_symbols():
    with pytest.raises(TextSanitizationError):
        sanitize_plain_text("quente ☕", max_length=50)


def test_rejects_control_characters():
    with pytest.raises(TextSanitizationError, match="caracteres inválidos"):
        sanitize_plain_text("amendoim\x00", max_length=50)


def test_rejects_control_characters_in_multiline_mode():
    with pytest.raises(TextSanitizationError):
        sanitize_plain_text("linha\x1b[31m", max_length=50, allow_newlines=True)


def test_enforces_max_length_after_normalization():
    assert sanitize_plain_text("  " + "a" * 10 + "  ", max_length=10) == "a" * 10
    with pytest.raises(TextSanitizationError, match="no máximo 10 caracteres"):
        sanitize_plain_text("a" * 11, max_length=10)


def test_enforces_min_length():
    with pytest.raises(TextSanitizationError, match="obrigatório"):
        sanitize_plain_text("   ", max_length=10, min_length=1, field_label="Nome do prato")


def test_accepts_accented_text():
    assert sanitize_plain_text("Pão de queijo, açaí", max_length=50) == "Pão de queijo, açaí"


@pytest.mark.parametrize("value", [None, "", "   "])
def test_optional_empty_becomes_none(value):
    assert sanitize_optional(value, max_length=10) is None
