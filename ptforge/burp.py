"""Reading Burp Suite XML issue exports."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ptforge.frame import Frame

log = logging.getLogger(__name__)

JS_LIBRARY_ISSUE_TYPE = "5243008"
NVD_DETAIL_URL = "https://nvd.nist.gov/vuln/detail/"

_CVE_ANCHOR = re.compile(
    r'<a href="https?://nvd\.nist\.gov/vuln/detail/(CVE-\d{4}-\d{4,7})">'
    r"CVE-\d{4}-\d{4,7}</a>:\s*(.*?)<br>",
    re.ASCII,
)


class NoEntriesError(LookupError):
    """Raised when a report holds no entries of the requested kind."""


@dataclass(frozen=True)
class Host:
    ip: str = ""
    name: str = ""


@dataclass(frozen=True)
class RequestResponse:
    request: Optional[str] = None
    request_method: str = ""
    request_base64: str = ""
    response: Optional[str] = None
    response_base64: str = ""
    response_redirected: Optional[str] = None


@dataclass(frozen=True)
class Issue:
    serial_number: str = ""
    type: str = ""
    name: str = ""
    host: Host = field(default_factory=Host)
    path: str = ""
    location: str = ""
    severity: str = ""
    confidence: str = ""
    issue_background: Optional[str] = None
    remediation_background: Optional[str] = None
    references: Optional[str] = None
    vulnerability_classifications: Optional[str] = None
    issue_detail: str = ""
    issue_detail_items: Optional[list[str]] = None
    remediation_detail: Optional[str] = None
    request_responses: list[RequestResponse] = field(default_factory=list)

    @property
    def url(self) -> str:
        return f"{self.host.name}{self.path}"


@dataclass(frozen=True)
class BurpReport:
    burp_version: str = ""
    export_time: str = ""
    issues: list[Issue] = field(default_factory=list)


def _last(parent: ET.Element, tag: str) -> Optional[ET.Element]:
    found = None
    for child in parent:
        if child.tag == tag:
            found = child
    return found


def _text(parent: ET.Element, tag: str) -> Optional[str]:
    element = _last(parent, tag)
    return None if element is None else (element.text or "")


def _parse_request_response(element: ET.Element) -> RequestResponse:
    request = _last(element, "request")
    response = _last(element, "response")
    return RequestResponse(
        request=None if request is None else (request.text or ""),
        request_method="" if request is None else request.get("method", ""),
        request_base64="" if request is None else request.get("base64", ""),
        response=None if response is None else (response.text or ""),
        response_base64="" if response is None else response.get("base64", ""),
        response_redirected=_text(element, "responseRedirected"),
    )


def _parse_issue(element: ET.Element) -> Issue:
    host = _last(element, "host")
    items = _last(element, "issueDetailItems")
    return Issue(
        serial_number=_text(element, "serialNumber") or "",
        type=_text(element, "type") or "",
        name=_text(element, "name") or "",
        host=Host() if host is None else Host(ip=host.get("ip", ""), name=host.text or ""),
        path=_text(element, "path") or "",
        location=_text(element, "location") or "",
        severity=_text(element, "severity") or "",
        confidence=_text(element, "confidence") or "",
        issue_background=_text(element, "issueBackground"),
        remediation_background=_text(element, "remediationBackground"),
        references=_text(element, "references"),
        vulnerability_classifications=_text(element, "vulnerabilityClassifications"),
        issue_detail=_text(element, "issueDetail") or "",
        issue_detail_items=None
        if items is None
        else [item.text or "" for item in items if item.tag == "issueDetailItem"],
        remediation_detail=_text(element, "remediationDetail"),
        request_responses=[
            _parse_request_response(child) for child in element if child.tag == "requestresponse"
        ],
    )


def parse_xml(data: str | bytes) -> BurpReport:
    """Parse the text of a Burp XML issue export."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ValueError(f"invalid Burp XML: {exc}") from exc
    if root.tag != "issues":
        raise ValueError(f"expected element issues, found {root.tag}")
    return BurpReport(
        burp_version=root.get("burpVersion", ""),
        export_time=root.get("exportTime", ""),
        issues=[_parse_issue(child) for child in root if child.tag == "issue"],
    )


def parse_file(filename: str | Path) -> BurpReport:
    """Read and parse a Burp XML issue export."""
    try:
        return parse_xml(Path(filename).read_bytes())
    except (OSError, ValueError) as exc:
        log.debug("burp.parse_file filename=%s error=%s", filename, exc)
        raise


def to_frame(report: BurpReport) -> Frame:
    """Tabulate every issue as Host, Title, URL, Details."""
    records = []
    for issue in report.issues:
        log.debug("burp.to_frame host=%s vuln=%s location=%s", issue.host.ip, issue.name, issue.url)
        records.append(
            {"Host": issue.host.ip, "Title": issue.name, "URL": issue.url, "Details": issue.issue_detail}
        )
    return Frame.from_records(records, ["Host", "Title", "URL", "Details"])


def parse_js_vulns(report: BurpReport) -> Frame:
    """Extract one row per CVE cited in vulnerable-JavaScript-library issues."""
    records = []
    for issue in report.issues:
        if issue.type != JS_LIBRARY_ISSUE_TYPE:
            log.debug("burp.parse_js_vulns id mismatch id=%s", issue.type)
            continue
        for match in _CVE_ANCHOR.finditer(issue.issue_detail):
            cve, details = match.group(1), match.group(2)
            records.append(
                {
                    "Host": issue.host.ip,
                    "URL": issue.url,
                    "Title": issue.name,
                    "CVE": cve,
                    "Reference": f"{NVD_DETAIL_URL}{cve}",
                    "Details": details,
                }
            )
            log.debug("burp.parse_js_vulns match url=%s cve=%s", issue.url, cve)
    if not records:
        raise NoEntriesError("no valid entries found")
    return Frame.from_records(records, ["Host", "Title", "URL", "Details", "CVE", "Reference"])