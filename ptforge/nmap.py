"""Reading nmap XML output and picking weak SSH/TLS algorithms out of script results."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ptforge.frame import Frame
from ptforge.nessus import SSH_DETECTION_PLUGIN, SSL_PLUGIN_LIST, Plugin
from ptforge.weak_algorithms import (
    SSH_ALGORITHMS,
    SSL_CIPHERS,
    SSL_GRADES,
    column_label,
    is_weak,
)

log = logging.getLogger(__name__)

SSL_SCRIPT = "ssl-enum-ciphers"
SSH_SCRIPT = "ssh2-enum-algos"

_SUPPORTED_TLS_VERSIONS = ("TLSv1.2", "TLSv1.1", "TLSv1.0")
_GRADES = ("A", "B", "C", "D", "E", "F")
_SCRIPT_COLUMNS = ["Host", "Port", "Algorithm Type", "Algorithm"]


@dataclass(frozen=True)
class Address:
    addr: str = ""
    addr_type: str = ""


@dataclass(frozen=True)
class Table:
    """A script result table; tables may nest."""

    key: str = ""
    elems: list[str] = field(default_factory=list)
    tables: list["Table"] = field(default_factory=list)


@dataclass(frozen=True)
class Script:
    id: str = ""
    output: str = ""
    tables: list[Table] = field(default_factory=list)


@dataclass(frozen=True)
class Port:
    protocol: str = ""
    port_id: str = ""
    state: str = ""
    service: str = ""
    script: Script = field(default_factory=Script)


@dataclass(frozen=True)
class NmapHost:
    start_time: str = ""
    end_time: str = ""
    status: str = ""
    addresses: list[Address] = field(default_factory=list)
    hostnames: list[str] = field(default_factory=list)
    ports: list[Port] = field(default_factory=list)

    @property
    def primary_address(self) -> str:
        """The last IPv4 address of the host, else its first address."""
        if not self.addresses:
            raise ValueError("host has no address")
        for address in reversed(self.addresses):
            if address.addr_type == "ipv4":
                return address.addr
        return self.addresses[0].addr


@dataclass(frozen=True)
class NmapReport:
    hosts: list[NmapHost] = field(default_factory=list)


def _last(parent: ET.Element, tag: str) -> Optional[ET.Element]:
    found = None
    for child in parent:
        if child.tag == tag:
            found = child
    return found


def _parse_table(element: ET.Element) -> Table:
    return Table(
        key=element.get("key", ""),
        elems=[child.text or "" for child in element if child.tag == "elem"],
        tables=[_parse_table(child) for child in element if child.tag == "table"],
    )


def _parse_script(element: Optional[ET.Element]) -> Script:
    if element is None:
        return Script()
    return Script(
        id=element.get("id", ""),
        output=element.get("output", ""),
        tables=[_parse_table(child) for child in element if child.tag == "table"],
    )


def _parse_port(element: ET.Element) -> Port:
    state = _last(element, "state")
    service = _last(element, "service")
    return Port(
        protocol=element.get("protocol", ""),
        port_id=element.get("portid", ""),
        state="" if state is None else state.get("state", ""),
        service="" if service is None else service.get("name", ""),
        script=_parse_script(_last(element, "script")),
    )


def _parse_host(element: ET.Element) -> NmapHost:
    status = _last(element, "status")
    return NmapHost(
        start_time=element.get("starttime", ""),
        end_time=element.get("endtime", ""),
        status="" if status is None else status.get("state", ""),
        addresses=[
            Address(addr=child.get("addr", ""), addr_type=child.get("addrtype", ""))
            for child in element
            if child.tag == "address"
        ],
        hostnames=[
            name.get("name", "")
            for group in element
            if group.tag == "hostnames"
            for name in group
            if name.tag == "hostname"
        ],
        ports=[
            _parse_port(port)
            for group in element
            if group.tag == "ports"
            for port in group
            if port.tag == "port"
        ],
    )


def parse_xml(data: str | bytes) -> NmapReport:
    """Parse the text of an nmap XML (-oX) file."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ValueError(f"invalid nmap XML: {exc}") from exc
    if root.tag != "nmaprun":
        raise ValueError(f"expected element nmaprun, found {root.tag}")
    return NmapReport(hosts=[_parse_host(child) for child in root if child.tag == "host"])


def parse_nmap(filename: str | Path) -> NmapReport:
    """Read and parse an nmap XML file."""
    try:
        return parse_xml(Path(filename).read_bytes())
    except (OSError, ValueError) as exc:
        log.debug("nmap.parse_nmap filename=%s error=%s", filename, exc)
        raise


def open_ports(report: NmapReport) -> Frame:
    """Tabulate every reported port as Host, Port."""
    records = []
    for host in report.hosts:
        address = host.primary_address
        for port in host.ports:
            log.debug("nmap.open_ports host=%s port=%s", address, port.port_id)
            records.append({"Host": address, "Port": port.port_id})
    return Frame.from_records(records, ["Host", "Port"])


def _cipher_columns(elems: list[str]) -> Optional[tuple[str, str, str]]:
    """Find grade, IANA name and type/strength among a cipher's elements."""
    grade = iana = strength = None
    for index, elem in enumerate(elems):
        if elem in _GRADES:
            grade = index
        elif not elem.startswith("TLS_"):
            strength = index
        else:
            iana = index
    if grade is None or iana is None or strength is None:
        return None
    return elems[grade], elems[iana], elems[strength]


def _ssl_records(address: str, port: Port) -> Iterator[dict[str, str]]:
    for suite in port.script.tables:
        if suite.key not in _SUPPORTED_TLS_VERSIONS:
            continue
        label = column_label(suite.key)
        for group in suite.tables:
            if group.key != "ciphers":
                continue
            for cipher in group.tables:
                columns = _cipher_columns(cipher.elems)
                if columns is None:
                    log.error("failed to map nmap script columns correctly. (ssl-enum-ciphers)")
                    break
                grade, iana, strength = columns
                if (
                    is_weak(SSL_GRADES, grade)
                    or "CBC" in iana.upper()
                    or is_weak(SSL_CIPHERS, iana)
                ):
                    yield {
                        "Host": address,
                        "Port": port.port_id,
                        "Algorithm Type": label,
                        "Algorithm": f"{iana} ({strength})",
                    }


def _ssh_records(address: str, port: Port) -> Iterator[dict[str, str]]:
    for table in port.script.tables:
        for row in table.elems:
            if is_weak(SSH_ALGORITHMS, row.strip()):
                label = column_label(table.key)
                log.debug(
                    "nmap.script_output weak algorithm host=%s:%s type=%s algorithm=%s",
                    address,
                    port.port_id,
                    label,
                    row.strip(),
                )
                yield {
                    "Host": address,
                    "Port": port.port_id,
                    "Algorithm Type": label,
                    "Algorithm": row,
                }


def script_output(report: NmapReport) -> Frame:
    """Tabulate weak algorithms found by ssl-enum-ciphers and ssh2-enum-algos."""
    records = []
    for host in report.hosts:
        address = host.primary_address
        for port in host.ports:
            if port.script.id == SSL_SCRIPT:
                records.extend(_ssl_records(address, port))
            elif port.script.id == SSH_SCRIPT:
                records.extend(_ssh_records(address, port))
    return Frame.from_records(records, _SCRIPT_COLUMNS)


def _targets(plugins: Iterable[Plugin], plugin_list: str) -> tuple[list[str], list[str]]:
    wanted = set(plugin_list.split(" "))
    hosts: list[str] = []
    ports: list[str] = []
    for plugin in plugins:
        if str(plugin.plugin_id) not in wanted:
            continue
        if plugin.host not in hosts:
            hosts.append(plugin.host)
        port = str(plugin.port)
        if port not in ports:
            ports.append(port)
    return hosts, ports


def _gather(
    plugins: Iterable[Plugin], plugin_list: str, script: str, output_name: str
) -> Optional[str]:
    hosts, ports = _targets(plugins, plugin_list)
    if not hosts:
        log.error("Failed to find hosts to gather %s evidence from.", script)
        return None
    if not output_name.endswith(".xml"):
        output_name += ".xml"
    log.debug("gather hosts=%s ports=%s", hosts, ports)

    with tempfile.NamedTemporaryFile("w", delete=False, encoding="utf-8") as handle:
        handle.write("\n".join(hosts))
        host_file = handle.name
    command = [
        "nmap",
        "--script", script,
        "-p", ",".join(ports),
        "-iL", host_file,
        "-oX", output_name,
        "-Pn", "-n",
    ]
    log.debug("running %s", command)
    try:
        subprocess.run(command, capture_output=True, check=True, env=dict(os.environ))
    except (OSError, subprocess.CalledProcessError) as exc:
        log.error("Failed to run nmap command: %s", exc)
    finally:
        Path(host_file).unlink(missing_ok=True)
    return output_name


def gather_ssh(plugins: Iterable[Plugin], output_name: str) -> Optional[str]:
    """Run ssh2-enum-algos against hosts from SSH detection findings.

    Returns the nmap XML file name, or None when no host qualifies.
    """
    return _gather(plugins, SSH_DETECTION_PLUGIN, SSH_SCRIPT, output_name)


def gather_ssl(plugins: Iterable[Plugin], output_name: str) -> Optional[str]:
    """Run ssl-enum-ciphers against hosts from SSL-related findings.

    Returns the nmap XML file name, or None when no host qualifies.
    """
    return _gather(plugins, SSL_PLUGIN_LIST, SSL_SCRIPT, output_name)