import base64
from email.message import EmailMessage

import pytest

from tempmail.mail.parsers import (
    MAX_DEPTH,
    ParsedBody,
    get_boundary,
    guess_html,
    parse_email_body,
    parse_headers,
    split_headers_and_body,
    split_multipart,
)

ALTERNATIVE_BODY = (
    "--ALT\r\n"
    "Content-Type: text/plain; charset=utf-8\r\n"
    "\r\n"
    "plain body\r\n"
    "--ALT\r\n"
    "Content-Type: text/html; charset=utf-8\r\n"
    "\r\n"
    "<b>html body</b>\r\n"
    "--ALT--\r\n"
)


def build_alternative() -> str:
    return 'Content-Type: multipart/alternative; boundary="ALT"\r\n\r\n' + ALTERNATIVE_BODY


def build_mixed_with_attachment(attachment_first: bool = False) -> str:
    alternative = 'Content-Type: multipart/alternative; boundary="ALT"\r\n\r\n' + ALTERNATIVE_BODY
    attachment = (
        "Content-Type: application/pdf; name=quote.pdf\r\n"
        "Content-Disposition: attachment; filename=quote.pdf\r\n"
        "Content-Transfer-Encoding: base64\r\n"
        "\r\n"
        + base64.b64encode(b"%PDF-1.4 not really a pdf").decode()
    )
    parts = [attachment, alternative] if attachment_first else [alternative, attachment]
    return (
        "From: sender@example.com\r\n"
        "To: inbox@temp.example.com\r\n"
        "Content-Type: multipart/mixed; boundary=MIX\r\n"
        "\r\n"
        "This is a multi-part message in MIME format.\r\n"
        f"--MIX\r\n{parts[0]}\r\n"
        f"--MIX\r\n{parts[1]}\r\n"
        "--MIX--\r\n"
        "epilogue text\r\n"
    )


def test_empty_input_gives_empty_fields():
    assert parse_email_body("") == ParsedBody("", "")
    assert parse_email_body(None) == ParsedBody("", "")


def test_plain_single_part_promotes_text_to_html():
    raw = "Content-Type: text/plain; charset=utf-8\r\n\r\nHello, 世界"
    out = parse_email_body(raw)
    assert out.text == "Hello, 世界"
    assert "Hello, 世界" in out.html
    assert out.html.startswith("<pre")


def test_synthesized_html_is_escaped():
    out = parse_email_body("Content-Type: text/plain\r\n\r\n<a href=\"x\">Tom & 'Jerry'</a>")
    assert "<a href" not in out.html
    assert "&lt;a href=&quot;x&quot;&gt;Tom &amp; &#x27;Jerry&#x27;&lt;/a&gt;" in out.html


def test_base64_html_leaf():
    encoded = base64.b64encode(b"<p>hi</p>").decode()
    raw = "Content-Type: text/html\r\nContent-Transfer-Encoding: base64\r\n\r\n" + encoded
    out = parse_email_body(raw)
    assert out.html == "<p>hi</p>"
    assert out.text == ""


def test_quoted_printable_soft_break_and_escape():
    raw = (
        "Content-Type: text/plain; charset=utf-8\r\n"
        "Content-Transfer-Encoding: quoted-printable\r\n"
        "\r\n"
        "Caf=\r\n=E9"
    )
    assert parse_email_body(raw).text == "Café"


def test_quoted_printable_utf8_sequence():
    raw = (
        "Content-Type: text/plain; charset=UTF-8\r\n"
        "Content-Transfer-Encoding: Quoted-Printable\r\n"
        "\r\n"
        "Gr=C3=BC=C3=9Fe =3D greetings"
    )
    assert parse_email_body(raw).text == "Grüße = greetings"


def test_multipart_alternative_keeps_both_bodies():
    out = parse_email_body(build_alternative())
    assert out.text == "plain body"
    assert out.html == "<b>html body</b>"


def test_nested_multipart_ignores_attachment():
    expected = parse_email_body(build_alternative())
    assert parse_email_body(build_mixed_with_attachment()) == expected
    assert parse_email_body(build_mixed_with_attachment(attachment_first=True)) == expected


def test_missing_boundary_marker_falls_back_to_leaf():
    raw = "Content-Type: multipart/mixed; boundary=X\r\n\r\nJust some text without framing"
    out = parse_email_body(raw)
    assert out.text == "Just some text without framing"
    assert "Just some text without framing" in out.html


def test_multipart_without_boundary_parameter_falls_back_to_leaf():
    out = parse_email_body("Content-Type: multipart/mixed\r\n\r\nbody text")
    assert out.text == "body text"


def test_parse_is_idempotent():
    raw = build_mixed_with_attachment()
    assert parse_email_body(raw) == parse_email_body(raw)


def test_mixed_scenario():
    raw = (
        "Content-Type: multipart/mixed; boundary=XYZ\r\n"
        "\r\n"
        "--XYZ\r\n"
        "Content-Type: text/plain\r\n"
        "\r\n"
        "Plain text body\r\n"
        "--XYZ\r\n"
        "Content-Type: text/html\r\n"
        "\r\n"
        "<p>Html body</p>\r\n"
        "--XYZ--\r\n"
    )
    assert parse_email_body(raw) == ParsedBody(text="Plain text body", html="<p>Html body</p>")


def test_lf_only_message():
    raw = (
        "Content-Type: multipart/alternative; boundary=b1\n"
        "\n"
        "--b1\n"
        "Content-Type: text/plain\n"
        "\n"
        "line one\n"
        "line two\n"
        "--b1--\n"
    )
    assert parse_email_body(raw).text == "line one\nline two"


def test_first_text_part_wins():
    raw = (
        "Content-Type: multipart/mixed; boundary=B\r\n\r\n"
        "--B\r\nContent-Type: text/plain\r\n\r\nfirst\r\n"
        "--B\r\nContent-Type: text/plain\r\n\r\nsecond\r\n"
        "--B--\r\n"
    )
    assert parse_email_body(raw).text == "first"


def test_part_without_content_type_counts_as_text():
    raw = (
        "Content-Type: multipart/mixed; boundary=B\r\n\r\n"
        "--B\r\n\r\nimplicit text/plain\r\n"
        "--B--\r\n"
    )
    assert parse_email_body(raw).text == "implicit text/plain"


def test_embedded_rfc822_message_is_parsed():
    raw = (
        "Content-Type: multipart/mixed; boundary=OUTER\r\n\r\n"
        "--OUTER\r\n"
        "Content-Type: message/rfc822\r\n"
        "\r\n"
        "Subject: forwarded\r\n"
        "Content-Type: text/html; charset=utf-8\r\n"
        "Content-Transfer-Encoding: base64\r\n"
        "\r\n"
        + base64.b64encode("<p>inner ✓</p>".encode()).decode()
        + "\r\n--OUTER--\r\n"
    )
    out = parse_email_body(raw)
    assert out.html == "<p>inner ✓</p>"


def test_folded_content_type_header():
    raw = (
        "Content-Type: multipart/alternative;\r\n"
        '\tboundary="folded-Boundary"\r\n'
        "\r\n"
        "--folded-Boundary\r\nContent-Type: text/plain\r\n\r\nunfolded\r\n"
        "--folded-Boundary--\r\n"
    )
    assert parse_email_body(raw).text == "unfolded"


def test_truncated_multipart_keeps_last_part():
    raw = (
        "Content-Type: multipart/alternative; boundary=T\r\n\r\n"
        "--T\r\nContent-Type: text/plain\r\n\r\ncut off"
    )
    assert parse_email_body(raw).text == "cut off"


def test_latin1_charset_base64():
    encoded = base64.b64encode("Café crème".encode("latin-1")).decode()
    raw = (
        "Content-Type: text/plain; charset=ISO-8859-1\r\n"
        "Content-Transfer-Encoding: base64\r\n\r\n" + encoded
    )
    assert parse_email_body(raw).text == "Café crème"


def test_unknown_charset_keeps_utf8():
    encoded = base64.b64encode("naïve".encode("utf-8")).decode()
    raw = (
        "Content-Type: text/plain; charset=x-no-such-charset\r\n"
        "Content-Transfer-Encoding: base64\r\n\r\n" + encoded
    )
    assert parse_email_body(raw).text == "naïve"


def test_invalid_base64_returns_original_text():
    raw = "Content-Type: text/plain\r\nContent-Transfer-Encoding: base64\r\n\r\nthis is not base64!"
    assert parse_email_body(raw).text == "this is not base64!"


def test_html_guessed_from_undeclared_body():
    doc = "<!DOCTYPE html><html><body><p>Hi</p></body></html>"
    raw = "Content-Type: application/octet-stream\r\n\r\n" + doc
    out = parse_email_body(raw)
    assert out.html == doc


def test_no_header_separator_treats_everything_as_body():
    out = parse_email_body("just a line of text")
    assert out.text == "just a line of text"


def test_deep_nesting_is_bounded():
    def nest(level: int) -> str:
        if level == 0:
            return "Content-Type: text/plain\r\n\r\ndeep"
        return (
            f"Content-Type: multipart/mixed; boundary=L{level}\r\n\r\n"
            f"--L{level}\r\n{nest(level - 1)}\r\n--L{level}--"
        )

    assert parse_email_body(nest(5)).text == "deep"
    out = parse_email_body(nest(MAX_DEPTH + 30))
    assert isinstance(out.text, str) and out.text
    assert isinstance(out.html, str)


def test_never_raises_on_garbage():
    samples = [
        "\r\n\r\n",
        "\x00\x01\xff\xfe binary",
        "Content-Type: multipart/mixed; boundary=\r\n\r\n--\r\n--",
        "Content-Type: multipart/mixed; boundary=Q\r\n\r\n--Q\r\n--Q\r\n--Q--",
        "Content-Transfer-Encoding: quoted-printable\r\n\r\n=",
        "Content-Transfer-Encoding: base64\r\n\r\n====",
        ":\r\n: :\r\n\r\n<html",
        "A" * 500_000,
        bytes(range(256)).decode("latin-1") * 10,
    ]
    for raw in samples:
        out = parse_email_body(raw)
        assert isinstance(out.text, str)
        assert isinstance(out.html, str)
        assert out.text or out.html


def test_stdlib_generated_message():
    msg = EmailMessage()
    msg["From"] = "a@example.com"
    msg["To"] = "b@example.com"
    msg["Subject"] = "Test"
    msg.set_content("Grüße aus Köln", cte="quoted-printable")
    msg.add_alternative("<p>Grüße aus <b>Köln</b></p>", subtype="html", cte="base64")
    out = parse_email_body(msg.as_string())
    assert "Grüße aus Köln" in out.text
    assert "<p>Grüße aus <b>Köln</b></p>" in out.html


def test_split_headers_and_body():
    headers, body = split_headers_and_body("A: 1\nB: 2\n\nbody\n\nmore")
    assert headers == {"a": "1", "b": "2"}
    assert body == "body\n\nmore"
    assert split_headers_and_body("no separator") == ({}, "no separator")


def test_parse_headers_unfolds_and_ignores_noise():
    headers = parse_headers(
        "Subject: a long\r\n   subject line\r\nnot a header line\r\nX-Key:value"
    )
    assert headers == {"subject": "a long subject line", "x-key": "value"}


def test_get_boundary_preserves_case():
    assert get_boundary('multipart/mixed; BOUNDARY="AbC-123"') == "AbC-123"
    assert get_boundary("multipart/mixed; boundary = plainToken; charset=x") == "plainToken"
    assert get_boundary("text/plain") == ""
    assert get_boundary(None) == ""


def test_split_multipart_drops_preamble_and_epilogue():
    body = "preamble\n--b\nA: 1\n\none\n--b\nA: 2\n\ntwo\n--b--\nepilogue"
    assert split_multipart(body, "b") == ["A: 1\n\none", "A: 2\n\ntwo"]
    assert split_multipart(body, "") == []
    assert split_multipart(body, "other") == []


def test_guess_html_requires_closing_tag():
    assert guess_html("<html><body>open only") == ""
    assert guess_html("x <HTML>y</HTML> z") == "<HTML>y</HTML>"


@pytest.mark.parametrize("charset", ["hex", "base64", "rot13", "zlib", "idna"])
@pytest.mark.parametrize("encoding", ["7bit", "base64", "quoted-printable"])
def test_non_text_charset_does_not_raise(charset, encoding):
    body = {
        "7bit": "hello",
        "base64": base64.b64encode(b"hello").decode(),
        "quoted-printable": "hel=6Co",
    }[encoding]
    raw = (
        f"Content-Type: text/plain; charset={charset}\r\n"
        f"Content-Transfer-Encoding: {encoding}\r\n\r\n{body}"
    )
    assert parse_email_body(raw).text == "hello"
