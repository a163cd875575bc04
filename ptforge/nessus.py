"""Reading Nessus v2 reports and filtering their plugin findings."""

from __future__ import annotations

import dataclasses
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from ptforge.frame import Frame

log = logging.getLogger(__name__)

SSL_PLUGIN_LIST = (
    "31705 57582 157288 104743 42873 104743 157288 51192 20007 65821 31705 78479 15901"
)
INFO_PLUGIN_LIST = "10107 149334 149334"
SSH_DETECTION_PLUGIN = "10267"

SEVERITIES = {
    0: "INFO",
    1: "LOW",
    2: "MEDIUM",
    3: "HIGH",
    4: "CRITICAL",
}

_ROOT_TAG = "NessusClientData_v2"
_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Plugin:
    """One ReportItem of a Nessus report."""

    port: int = 0
    plugin_id: int = 0
    plugin_name: str = ""
    severity: int = 0
    plugin_output: str = ""
    host: str = ""


@dataclass(frozen=True)
class ReportHost:
    name: str
    plugins: list[Plugin] = field(default_factory=list)


@dataclass(frozen=True)
class NessusReport:
    hosts: list[ReportHost] = field(default_factory=list)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _int_attr(element: ET.Element, name: str) -> int:
    raw = element.get(name, "").strip()
    if not raw:
        return 0
    if not _INT_RE.fullmatch(raw):
        raise ValueError(f"attribute {name!r} is not an integer: {raw!r}")
    return int(raw)


def _parse_plugin(element: ET.Element) -> Plugin:
    output = ""
    for child in element:
        if _local(child.tag) == "plugin_output":
            output = child.text or ""
    return Plugin(
        port=_int_attr(element, "port"),
        plugin_id=_int_attr(element, "pluginID"),
        plugin_name=element.get("pluginName", ""),
        severity=_int_attr(element, "severity"),
        plugin_output=output,
    )


def parse_xml(data: str | bytes) -> NessusReport:
    """Parse the text of a .nessus file."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ValueError(f"invalid Nessus XML: {exc}") from exc
    if _local(root.tag) != _ROOT_TAG:
        raise ValueError(f"expected element {_ROOT_TAG}, found {_local(root.tag)}")
    hosts = [
        ReportHost(
            name=host.get("name", ""),
            plugins=[_parse_plugin(item) for item in host if _local(item.tag) == "ReportItem"],
        )
        for report in root
        if _local(report.tag) == "Report"
        for host in report
        if _local(host.tag) == "ReportHost"
    ]
    return NessusReport(hosts=hosts)


def parse_file(filename: str | Path) -> NessusReport:
    """Read and parse a .nessus file."""
    try:
        return parse_xml(Path(filename).read_bytes())
    except (OSError, ValueError) as exc:
        log.debug("nessus.parse_file filename=%s error=%s", filename, exc)
        raise


def process_filter(flag: str) -> list[int]:
    """Turn a space-separated list of plugin IDs into integers; any bad entry yields []."""
    ids = []
    for part in flag.split(" "):
        if not _INT_RE.fullmatch(part):
            return []
        ids.append(int(part))
    return ids


def filter_plugins(report: NessusReport, include: str, exclude: str) -> list[Plugin]:
    """Collect plugins from every host, restricted by include or exclude ID lists.

    When both lists are given nothing is selected.
    """
    include_ids = process_filter(include) if include else []
    exclude_ids = process_filter(exclude) if exclude else []
    log.debug("nessus.filter_plugins include-ids=%s exclude-ids=%s", include_ids, exclude_ids)

    def wanted(plugin: Plugin) -> bool:
        if include_ids and exclude_ids:
            return False
        if include_ids:
            return plugin.plugin_id in include_ids
        if exclude_ids:
            return plugin.plugin_id not in exclude_ids
        return True

    return [
        dataclasses.replace(plugin, host=host.name)
        for host in report.hosts
        for plugin in host.plugins
        if wanted(plugin)
    ]


def plugins_to_frame(plugins: Iterable[Plugin], include_plugin_output: bool) -> Frame:
    """Tabulate plugins as Host, Port, Plugin ID, Title, Severity (and Plugin Output)."""
    columns = ["Host", "Port", "Plugin ID", "Title", "Severity"]
    if include_plugin_output:
        columns.append("Plugin Output")
    records = []
    for plugin in plugins:
        log.debug(
            "Nessus plugin host=%s port=%s title=%s", plugin.host, plugin.port, plugin.plugin_name
        )
        record = {
            "Host": plugin.host,
            "Port": str(plugin.port),
            "Plugin ID": str(plugin.plugin_id),
            "Title": plugin.plugin_name,
            "Severity": SEVERITIES.get(plugin.severity, ""),
        }
        if include_plugin_output:
            record["Plugin Output"] = plugin.plugin_output
        records.append(record)
    return Frame.from_records(records, columns)