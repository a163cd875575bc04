"""Evidence-directory loading, small string helpers and release checks."""

from __future__ import annotations

import json
import logging
import os
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

from ptforge import burp, nessus, nmap

log = logging.getLogger(__name__)

TAGS_URL_ENV = "PTFORGE_TAGS_URL"

Report = Union[nmap.NmapReport, burp.BurpReport, nessus.NessusReport]

_PARSERS = (nmap.parse_xml, burp.parse_xml, nessus.parse_xml)


@dataclass(frozen=True)
class Tag:
    """One release tag as listed by the tags endpoint."""

    name: str = ""
    zip_url: str = ""
    tar_url: str = ""
    node_id: str = ""
    commit: dict[str, str] = field(default_factory=dict)


def contains_any(text: str, items: Iterable[str]) -> bool:
    """Tell whether any of ``items`` occurs as a substring of ``text``."""
    return any(item in text for item in items)


def parse_dir(directory: str | Path) -> list[Report]:
    """Parse every file of ``directory`` as nmap, Burp or Nessus XML.

    Files are visited in name order; those no parser accepts are skipped.
    """
    root = Path(directory)
    if not root.exists():
        log.debug("helper.parse_dir directory=%s does not exist", root)
        raise FileNotFoundError(f"provided directory ({root}) does not exist")
    if not root.is_dir():
        raise NotADirectoryError(f"provided directory ({root}) does not appear to be a directory")

    reports: list[Report] = []
    for path in sorted(root.iterdir()):
        try:
            data = path.read_bytes()
        except OSError as exc:
            log.error("could not read %s: %s", path, exc)
            continue
        for parse in _PARSERS:
            try:
                reports.append(parse(data))
            except ValueError:
                continue
    return reports


def _tag_from_json(entry: dict) -> Tag:
    commit = entry.get("commit") or {}
    return Tag(
        name=str(entry.get("name", "")),
        zip_url=str(entry.get("zipball_url", "")),
        tar_url=str(entry.get("tarball_url", "")),
        node_id=str(entry.get("node_id", "")),
        commit={str(k): str(v) for k, v in commit.items()} if isinstance(commit, dict) else {},
    )


def check_updates(version: str, debug: bool = False) -> tuple[str, bool]:
    """Compare ``version`` with the newest published tag.

    The tags listing is fetched from the URL in the PTFORGE_TAGS_URL
    environment variable. Returns the newest tag name and whether the
    local version is behind it.
    """
    url = os.environ.get(TAGS_URL_ENV)
    if not url:
        raise LookupError(f"no release tags URL configured; set {TAGS_URL_ENV}")

    log.debug("Checking for updates")
    try:
        with urllib.request.urlopen(url, timeout=10) as response:
            body = response.read()
    except (OSError, ValueError) as exc:
        if debug:
            log.error("An error occurred during the latest version check: %s", exc)
        raise ConnectionError(f"could not fetch release tags: {exc}") from exc

    try:
        entries = json.loads(body)
    except ValueError as exc:
        log.error("Failed to parse json body of the release tags")
        raise ValueError(f"release tags are not valid JSON: {exc}") from exc
    if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
        raise ValueError("release tags listing holds no tags")

    tags = [_tag_from_json(entry) for entry in entries if isinstance(entry, dict)]
    latest = tags[0].name
    return latest, latest != f"v{version}"