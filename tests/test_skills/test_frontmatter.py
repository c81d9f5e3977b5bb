from skill_studio.frontmatter import UNKNOWN_SKILL_NAME, parse_frontmatter


def test_parse_frontmatter_returns_trimmed_fields():
    content = (
        "---\n"
        "name:   PDF Processing  \n"
        "description:  Extract text and tables from PDF files.   \n"
        "license: MIT\n"
        "---\n\n"
        "# PDF Processing\n"
    )

    assert parse_frontmatter(content) == ("PDF Processing", "Extract text and tables from PDF files.")


def test_parse_frontmatter_without_header_block_uses_defaults():
    assert parse_frontmatter("# Just a heading\n\nname: not-in-a-header\n") == (UNKNOWN_SKILL_NAME, "")
    assert parse_frontmatter("") == ("Unknown", "")


def test_parse_frontmatter_requires_header_at_document_start():
    content = "\n---\nname: late\ndescription: too late\n---\n"

    assert parse_frontmatter(content) == ("Unknown", "")


def test_parse_frontmatter_unclosed_header_is_treated_as_missing():
    assert parse_frontmatter("---\nname: open\ndescription: never closed\n") == ("Unknown", "")


def test_parse_frontmatter_missing_fields_fall_back_independently():
    assert parse_frontmatter("---\ndescription: Only a description\n---\n") == (
        "Unknown",
        "Only a description",
    )
    assert parse_frontmatter("---\nname: only-name\n---\nbody") == ("only-name", "")


def test_parse_frontmatter_keeps_colons_in_values_and_handles_crlf():
    content = "---\r\nname: review\r\ndescription: Use when: reviewing code\r\n---\r\nbody\r\n"

    assert parse_frontmatter(content) == ("review", "Use when: reviewing code")


def test_parse_frontmatter_ignores_fields_after_header():
    content = "---\ntitle: nothing useful\n---\nname: body-name\ndescription: body\n"

    assert parse_frontmatter(content) == ("Unknown", "")
