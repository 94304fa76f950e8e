"""
Standalone artifact builder.

A bundle is a zip application (.pyz) holding:
- the escape_room package source
- a generated __main__.py with the payload as a JSON string constant and the
  preview flag, which starts the terminal runtime

The payload JSON is escaped so that no character sequence in authored
content can end the literal it is embedded in: <, >, &, U+2028 and U+2029
are written as \\uXXXX escapes, and the JSON text itself is embedded through
repr(). json.loads() on the embedded constant returns the original payload.
"""

from __future__ import annotations

import json
import re
import shutil
import tempfile
import zipapp
from pathlib import Path

from loguru import logger

from .config import get_settings
from .exceptions import BundleError
from .payload import ContentPayload, dump_payload

PACKAGE_DIR = Path(__file__).parent

# Characters that can terminate an embedding context
_UNSAFE_CHARS = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

ENTRYPOINT_TEMPLATE = '''\
"""Standalone escape room bundle."""

import json
import sys

from loguru import logger

from escape_room.config import get_settings
from escape_room.payload import parse_payload
from escape_room.runner import play

PAYLOAD_JSON = {payload_literal}
PREVIEW = {preview!r}


def main():
    logger.remove()
    logger.add(sys.stderr, level=get_settings().log_level.upper(), format="<level>{{message}}</level>")
    play(parse_payload(json.loads(PAYLOAD_JSON)), preview=PREVIEW)


if __name__ == "__main__":
    main()
'''


def escape_unsafe(text: str) -> str:
    for char, escape in _UNSAFE_CHARS.items():
        text = text.replace(char, escape)
    return text


def serialize_payload(payload: ContentPayload) -> str:
    """JSON text of the payload (wire names) with unsafe characters escaped."""
    return escape_unsafe(json.dumps(dump_payload(payload), ensure_ascii=False))


def render_entrypoint(payload: ContentPayload, preview: bool = False) -> str:
    """Source of the artifact's __main__.py."""
    return ENTRYPOINT_TEMPLATE.format(
        payload_literal=repr(serialize_payload(payload)),
        preview=bool(preview),
    )


def default_artifact_name(title: str) -> str:
    """File name derived from the title: non-alphanumerics become '_'."""
    stem = re.sub(r"[^a-z0-9]", "_", title.lower()) or "escape_room"
    return f"{stem}.pyz"


def bundle(
    payload: ContentPayload,
    output: str | Path | None = None,
    preview: bool = False,
    interpreter: str | None = None,
) -> Path:
    """
    Write a self-contained artifact for a payload.

    Args:
        payload: Content to embed
        output: Target file or directory (defaults to settings.output_dir)
        preview: Bake in the preview override
        interpreter: Shebang interpreter (defaults to settings.interpreter)

    Returns:
        Path of the written artifact

    Raises:
        BundleError: If the artifact cannot be written
    """
    settings = get_settings()
    target = Path(output) if output is not None else Path(settings.output_dir)
    if target.suffix != ".pyz":
        target = target / default_artifact_name(payload.title)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="escape_room_bundle_") as staging:
            staging_dir = Path(staging)
            shutil.copytree(
                PACKAGE_DIR,
                staging_dir / PACKAGE_DIR.name,
                ignore=shutil.ignore_patterns("__pycache__", "*.pyc"),
            )
            (staging_dir / "__main__.py").write_text(
                render_entrypoint(payload, preview), encoding="utf-8"
            )
            zipapp.create_archive(
                staging_dir,
                target=target,
                interpreter=interpreter or settings.interpreter,
                compressed=True,
            )
    except OSError as exc:
        raise BundleError(f"Cannot write bundle {target}: {exc}") from exc

    logger.info("Wrote bundle {} ({} bytes, preview={})", target, target.stat().st_size, preview)
    return target
