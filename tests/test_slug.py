import pytest

from app.services.article_service import generate_slug, normalize_tags


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Hello, World!  Foo", "hello-world-foo"),
        ("  ---Test---  ", "test"),
        ("Refleksi Akhir Tahun 2024", "refleksi-akhir-tahun-2024"),
        ("a -- b", "a-b"),
        ("Émigré café", "migr-caf"),
        ("!!!", ""),
        ("", ""),
    ],
)
def test_generate_slug(title, expected):
    assert generate_slug(title) == expected


def test_generate_slug_is_idempotent():
    slug = generate_slug("Apa Kabar, Indonesia?")
    assert generate_slug(slug) == slug


def test_slug_characters():
    slug = generate_slug("  Mixed  CASE -- with_under/score & stuff ")
    assert slug == "mixed-case-withunderscore-stuff"
    assert all(c.isdigit() or ("a" <= c <= "z") or c == "-" for c in slug)


def test_normalize_tags_dedupes_keeping_order():
    assert normalize_tags(["A", "a", " A "]) == ["a"]
    assert normalize_tags(["Hukum", "politik", " HUKUM", "", "  "]) == ["hukum", "politik"]
    assert normalize_tags(None) == []
