"""Per-document file writer."""

import logging
import re
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]

from academy_scraper.config import OutputFormat

logger = logging.getLogger(__name__)

MAX_FILENAME_LENGTH = 200

_UNSAFE_CHARS_RE = re.compile(r'[<>:"/\\|?*]')


def sanitize_filename(title: str) -> str:
    """Turn a page title into a safe, lower-case file stem."""
    name = _UNSAFE_CHARS_RE.sub("_", title)
    name = name.replace("..", "_")
    name = re.sub(r"^\.", "_", name)
    name = re.sub(r"\s+", "_", name)
    name = re.sub(r"_{2,}", "_", name)
    name = name[:MAX_FILENAME_LENGTH].lower()
    return name or "untitled"


class DocumentWriter:
    """Write the rendered formats of one document next to each other.

    Stems handed out by :meth:`claim` are unique for the lifetime of the
    writer, so two pages sharing a title within one run get ``name`` and
    ``name_2`` instead of overwriting each other.  Files left by earlier
    runs are overwritten.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self._claimed: set[str] = set()

    def claim(self, title: str) -> str:
        """Reserve and return a file stem for ``title``."""
        base = sanitize_filename(title)
        stem = base
        n = 1
        while stem in self._claimed:
            n += 1
            suffix = f"_{n}"
            stem = base[: MAX_FILENAME_LENGTH - len(suffix)] + suffix
        if stem != base:
            logger.warning("Title %r already written in this run, saving as %s", title, stem)
        self._claimed.add(stem)
        return stem

    def paths_for(self, stem: str, formats: list[OutputFormat]) -> list[Path]:
        return [self.output_dir / f"{stem}.{fmt.value}" for fmt in formats]

    async def write(self, stem: str, outputs: dict[OutputFormat, str]) -> list[Path]:
        """Write each rendered format to ``<stem>.<ext>`` and return the paths."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

        written = []
        for path, content in zip(self.paths_for(stem, list(outputs)), outputs.values()):
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(content)
            written.append(path)

        logger.debug("Wrote %s", ", ".join(p.name for p in written))
        return written
