"""Writing findings frames to stdout, CSV and JSON."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from ptforge.frame import Frame

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportOptions:
    """Output settings shared by every report."""

    format_csv: bool = False
    format_json: bool = False
    format_stdout: bool = False
    output_ips: bool = False
    output_ports: bool = False
    debug: bool = False
    version: str = ""


@dataclass
class DataSet:
    name: str
    frames: list[Frame] = field(default_factory=list)


def _write(path: str, text: str) -> Path:
    target = Path(path)
    with target.open("w", encoding="utf-8", newline="") as handle:
        handle.write(text)
    return target


def _print_frame(options: ReportOptions, frame: Frame) -> None:
    if not options.output_ips or not options.output_ports:
        for row in frame.rows:
            print("".join(f"{value} " for value in row))
        return
    for host, port in zip(frame.column("Host"), frame.column("Port")):
        line = f"{host}:{port}"
        if not line.endswith(":0"):
            print(line)


def handle_reporting(
    options: ReportOptions, frames: Sequence[Frame], output_name: str
) -> list[Path]:
    """Emit the frames as requested by ``options``; return the files written."""
    frames = list(frames)
    if not frames:
        raise ValueError("no frames to report")

    if options.format_stdout:
        for frame in frames:
            _print_frame(options, frame)

    merged = functools.reduce(Frame.concat, frames)
    written = []

    if options.format_csv or options.format_json:
        log.info("Outputting file %s", output_name)

    if options.format_csv:
        if not output_name.endswith(".csv"):
            output_name += ".csv"
        written.append(_write(output_name, merged.to_csv()))

    if options.format_json:
        if not output_name.endswith(".json"):
            output_name += ".json"
        written.append(_write(output_name, merged.to_json()))

    return written