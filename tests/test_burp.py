import pytest

from ptforge import burp

DETAIL = (
    '<a href="https://nvd.nist.gov/vuln/detail/CVE-2020-11022">CVE-2020-11022</a>: '
    "Cross-site scripting in htmlPrefilter<br>"
    '<a href="http://nvd.nist.gov/vuln/detail/CVE-2019-11358">CVE-2019-11358</a>:'
    "Prototype pollution<br>"
)

SAMPLE = f"""<?xml version="1.0"?>
<issues burpVersion="2024.1" exportTime="Mon Jan 01 00:00:00 UTC 2024">
  <issue>
    <serialNumber>1</serialNumber>
    <type>5243008</type>
    <name>Vulnerable JavaScript dependency</name>
    <host ip="192.0.2.10">https://app.example.com</host>
    <path>/static/jquery.js</path>
    <location>/static/jquery.js</location>
    <severity>Low</severity>
    <confidence>Tentative</confidence>
    <issueDetail><![CDATA[{DETAIL}]]></issueDetail>
    <issueDetailItems>
      <issueDetailItem>jquery 1.8</issueDetailItem>
    </issueDetailItems>
    <requestresponse>
      <request method="GET" base64="false">GET / HTTP/1.1</request>
      <response base64="false">HTTP/1.1 200 OK</response>
    </requestresponse>
  </issue>
  <issue>
    <serialNumber>2</serialNumber>
    <type>2097920</type>
    <name>Cross-site scripting</name>
    <host ip="192.0.2.11">https://shop.example.com</host>
    <path>/search</path>
    <issueDetail>Reflected input</issueDetail>
  </issue>
</issues>
"""


@pytest.fixture
def report():
    return burp.parse_xml(SAMPLE)


def test_parse_structure(report):
    assert report.burp_version == "2024.1"
    assert len(report.issues) == 2
    first = report.issues[0]
    assert first.host == burp.Host(ip="192.0.2.10", name="https://app.example.com")
    assert first.issue_detail_items == ["jquery 1.8"]
    assert first.request_responses[0].request_method == "GET"
    assert first.request_responses[0].response == "HTTP/1.1 200 OK"


def test_optional_fields_absent(report):
    second = report.issues[1]
    assert second.issue_background is None
    assert second.issue_detail_items is None
    assert second.request_responses == []


def test_wrong_root_raises():
    with pytest.raises(ValueError):
        burp.parse_xml("<nmaprun/>")


def test_parse_file(tmp_path):
    path = tmp_path / "burp.xml"
    path.write_text(SAMPLE)
    assert [i.name for i in burp.parse_file(path).issues][1] == "Cross-site scripting"


def test_to_frame(report):
    frame = burp.to_frame(report)
    assert frame.columns == ("Host", "Title", "URL", "Details")
    assert frame.column("URL") == [
        "https://app.example.com/static/jquery.js",
        "https://shop.example.com/search",
    ]
    assert frame.column("Details")[1] == "Reflected input"


def test_parse_js_vulns(report):
    frame = burp.parse_js_vulns(report)
    assert frame.columns == ("Host", "Title", "URL", "Details", "CVE", "Reference")
    assert frame.column("CVE") == ["CVE-2020-11022", "CVE-2019-11358"]
    assert frame.column("Reference")[0] == "https://nvd.nist.gov/vuln/detail/CVE-2020-11022"
    assert frame.column("Details") == [
        "Cross-site scripting in htmlPrefilter",
        "Prototype pollution",
    ]
    assert set(frame.column("Host")) == {"192.0.2.10"}


def test_parse_js_vulns_none_found():
    report = burp.parse_xml(SAMPLE.replace("5243008", "1"))
    with pytest.raises(burp.NoEntriesError):
        burp.parse_js_vulns(report)