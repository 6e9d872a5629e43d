"""Charset detection and decoding for fetched pages.

Only a fixed set of CJK legacy encodings is decoded explicitly; everything
else is treated as UTF-8 (with replacement of undecodable bytes).
"""

import logging
import re

logger = logging.getLogger(__name__)

SUPPORTED_CHARSETS = {
    "CP932": "cp932",
    "CP936": "cp936",
    "CP949": "cp949",
    "CP950": "cp950",
    "GB2312": "gb2312",
    "GBK": "gbk",
    "GB18030": "gb18030",
    "BIG5": "big5",
    "SHIFT_JIS": "shift_jis",
    "EUC-JP": "euc_jp",
}

SNIFF_BYTES = 1024

_HEADER_CHARSET_RE = re.compile(r"charset=([^;]*)", re.I)
_HTML5_META_RE = re.compile(r"""<meta.+?charset=(['"])(.+?)\1""", re.I)
_HTML4_META_RE = re.compile(r"""<meta.+?content=["'].+;\s?charset=(.+?)["']""", re.I)


def detect_charset(body: bytes, content_type: str | None = None) -> str | None:
    """Return the declared charset label (upper-cased), or None.

    Checks the Content-Type header first, then HTML5 ``<meta charset>`` and
    HTML4 ``http-equiv`` hints in the first 1024 bytes of the body.
    """
    if content_type:
        m = _HEADER_CHARSET_RE.search(content_type)
        if m:
            return m.group(1).strip().strip("\"'").upper()

    head = body[:SNIFF_BYTES].decode("ascii", errors="ignore")
    if not head:
        return None

    m = _HTML5_META_RE.search(head)
    if m:
        return m.group(2).strip().upper()

    m = _HTML4_META_RE.search(head)
    if m:
        return m.group(1).strip().upper()

    return None


def decode_body(body: bytes, content_type: str | None = None) -> str:
    """Decode a response body to text using the detected charset."""
    charset = detect_charset(body, content_type)
    codec = SUPPORTED_CHARSETS.get(charset or "")
    if codec:
        logger.debug(f"Decoding body as {charset}")
        return body.decode(codec, errors="replace")
    return body.decode("utf-8", errors="replace")
