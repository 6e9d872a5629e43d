"""Unit tests for charset detection and body decoding."""

from unfurl.services.charset import decode_body, detect_charset

JAPANESE = "こんにちは世界"
CHINESE = "中文标题"


class TestDetectCharset:
    def test_from_content_type_header(self):
        assert detect_charset(b"", "text/html; charset=Shift_JIS") == "SHIFT_JIS"

    def test_quoted_header_value(self):
        assert detect_charset(b"", 'text/html; charset="euc-jp"') == "EUC-JP"

    def test_header_wins_over_meta(self):
        body = b'<html><head><meta charset="gbk"></head></html>'
        assert detect_charset(body, "text/html; charset=big5") == "BIG5"

    def test_html5_meta(self):
        body = b'<html><head><meta charset="gbk"><title>x</title></head></html>'
        assert detect_charset(body, "text/html") == "GBK"

    def test_html4_http_equiv(self):
        body = (
            b'<html><head><meta http-equiv="Content-Type" '
            b'content="text/html; charset=EUC-JP"></head></html>'
        )
        assert detect_charset(body, "text/html") == "EUC-JP"

    def test_meta_beyond_sniff_window_ignored(self):
        body = b"<html><head>" + b" " * 2000 + b'<meta charset="gbk"></head></html>'
        assert detect_charset(body, "text/html") is None

    def test_no_hint(self):
        assert detect_charset(b"<html></html>", None) is None


class TestDecodeBody:
    def test_supported_charset_from_header(self):
        body = f"<title>{JAPANESE}</title>".encode("shift_jis")
        assert JAPANESE in decode_body(body, "text/html; charset=shift_jis")

    def test_supported_charset_from_meta(self):
        body = b'<head><meta charset="gbk"><title>' + CHINESE.encode("gbk") + b"</title></head>"
        assert CHINESE in decode_body(body, "text/html")

    def test_unsupported_charset_falls_back_to_utf8(self):
        body = "<title>café</title>".encode("utf-8")
        assert "café" in decode_body(body, "text/html; charset=iso-8859-1")

    def test_invalid_bytes_replaced(self):
        text = decode_body(b"<title>\xff\xfe</title>", None)
        assert text.startswith("<title>")
        assert "�" in text
