"""Cookie string parsing and browser cookie-export loading."""

import json
import logging
from pathlib import Path

from academy_scraper.utils.url_utils import registrable_domain

logger = logging.getLogger(__name__)


def parse_cookie_string(cookie_string: str) -> dict[str, str]:
    """Split a ``name=value; name=value`` header into a dict.

    Pairs without a name or a value are skipped.
    """
    cookies: dict[str, str] = {}
    for pair in cookie_string.split(";"):
        name, sep, value = pair.strip().partition("=")
        if sep and name and value:
            cookies[name] = value
    return cookies


def load_cookie_file(path: Path, host: str) -> str:
    """Build a cookie header from a browser export.

    Supports the JSON list format written by Chrome/Edge extensions
    (``[{"domain": ..., "name": ..., "value": ...}]``) and the Netscape
    ``cookies.txt`` format written by Firefox exporters.  Only cookies whose
    domain belongs to the host's registrable domain are kept.
    """
    text = Path(path).read_text(encoding="utf-8")
    domain = registrable_domain(host)

    try:
        entries = json.loads(text)
    except json.JSONDecodeError:
        entries = None

    pairs: list[str] = []
    if isinstance(entries, list):
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            if domain not in str(entry.get("domain", "")):
                continue
            if entry.get("name") and entry.get("value"):
                pairs.append(f"{entry['name']}={entry['value']}")
    else:
        for line in text.splitlines():
            # "#HttpOnly_" prefixed lines are real cookies in the Netscape format
            if line.startswith("#HttpOnly_"):
                line = line[len("#HttpOnly_"):]
            elif not line.strip() or line.startswith("#"):
                continue
            parts = line.split("\t")
            if len(parts) < 7 or domain not in parts[0]:
                continue
            pairs.append(f"{parts[5]}={parts[6].strip()}")

    logger.debug("Loaded %d cookies for %s from %s", len(pairs), domain, path)
    return "; ".join(pairs)
