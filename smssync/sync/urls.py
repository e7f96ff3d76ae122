"""URL construction for the ``?task=`` endpoints."""

import logging
import re
from urllib.parse import quote_plus

from ..activity_log import LogSink, Messages

logger = logging.getLogger(__name__)

TASK_RESULT = "result"
TASK_SENT = "sent"


def encode_secret(secret: str, log_sink: LogSink | None = None) -> str:
    """Form-encode a secret as UTF-8 the way ``application/x-www-form-urlencoded`` does.

    Spaces become ``+``, ``*`` is left as is and ``~`` is percent-encoded.

    Falls back to the raw secret when it cannot be encoded, reporting the
    failure to ``log_sink``.
    """
    try:
        encoded = quote_plus(secret, safe="*", encoding="utf-8", errors="strict")
        return encoded.replace("~", "%7E")
    except UnicodeEncodeError as e:
        logger.warning(f"Secret encoding failed: {e}")
        if log_sink is not None:
            log_sink.append(f"{Messages.SECRET_ENCODING_FAILED} {e}")
        return secret


def build_task_url(
    base_url: str,
    task: str,
    secret: str | None = None,
    log_sink: LogSink | None = None,
) -> str:
    """Build ``<base>?task=<task>[&secret=<encoded>]``.

    If ``base_url`` already carries a query string the task parameter is
    appended with ``&``.
    """
    if base_url.endswith(("?", "&")):
        separator = ""
    elif "?" in base_url:
        separator = "&"
    else:
        separator = "?"

    url = f"{base_url}{separator}task={quote_plus(task)}"
    if secret:
        url = f"{url}&secret={encode_secret(secret, log_sink)}"
    return url


def redact_secret(url: str) -> str:
    """Mask the secret parameter of a task URL for log output."""
    return re.sub(r"([?&]secret=)[^&]*", r"\1***", url)
