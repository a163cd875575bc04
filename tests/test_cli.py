from datetime import datetime

import pytest

from ptforge import cli

NESSUS_XML = """<NessusClientData_v2><Report name="r">
<ReportHost name="10.0.0.5">
<ReportItem port="22" pluginID="10267" pluginName="SSH Server Type and Version Information" severity="0">
<plugin_output>SSH version : OpenSSH</plugin_output></ReportItem>
<ReportItem port="443" pluginID="51192" pluginName="SSL Certificate Cannot Be Trusted" severity="2"/>
</ReportHost></Report></NessusClientData_v2>"""

NESSUS_SSL_ONLY = """<NessusClientData_v2><Report name="r">
<ReportHost name="10.0.0.5">
<ReportItem port="443" pluginID="51192" pluginName="SSL Certificate Cannot Be Trusted" severity="2"/>
</ReportHost></Report></NessusClientData_v2>"""

NMAP_XML = """<nmaprun>
<host><status state="up"/><address addr="10.0.0.1" addrtype="ipv4"/>
<ports><port protocol="tcp" portid="22"><state state="open"/><service name="ssh"/></port></ports>
</host></nmaprun>"""

BURP_XML = """<issues burpVersion="2023.1" exportTime="now">
<issue><type>1</type><name>Issue</name><host ip="10.0.0.2">https://app.example.com</host>
<path>/</path><issueDetail>detail</issueDetail></issue></issues>"""


def test_default_output_name_format():
    assert cli.default_output_name(datetime(2024, 5, 1, 13, 4, 5)) == "2024_05_01_13-04-05_ptForge"


def test_parser_accepts_single_and_double_dash():
    parser = cli.build_parser()
    single = parser.parse_args(["-nmap", "scan.xml", "-review-ssl"])
    double = parser.parse_args(["--nmap", "scan.xml", "--review-ssl"])
    assert (single.nmap, single.review_ssl) == ("scan.xml", True)
    assert (double.nmap, double.review_ssl) == ("scan.xml", True)


def test_parser_defaults():
    args = cli.build_parser().parse_args([])
    assert args.nessus == ""
    assert args.csv is False
    assert args.silent is False


def test_version_flag(capsys):
    assert cli.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == "ptForge v0.0.7"


def test_changelog_flag():
    assert cli.main(["--changelog", "-s"]) == 0


def test_nessus_include_ids_to_csv(tmp_path, monkeypatch):
    (tmp_path / "scan.nessus").write_text(NESSUS_XML)
    monkeypatch.chdir(tmp_path)
    status = cli.main(["-s", "--nessus", "scan.nessus", "--include-ids", "10267",
                       "--csv", "--output", "deco"])
    assert status == 0
    written = list(tmp_path.glob("*_deco.csv"))
    assert len(written) == 1
    lines = written[0].read_text().splitlines()
    assert lines[0] == "Host,Port,Plugin ID,Title,Severity"
    assert lines[1:] == ["10.0.0.5,22,10267,SSH Server Type and Version Information,INFO"]


def test_nessus_plugin_output_column(tmp_path, monkeypatch):
    (tmp_path / "scan.nessus").write_text(NESSUS_XML)
    monkeypatch.chdir(tmp_path)
    assert cli.main(["-s", "--nessus", "scan.nessus", "--addpo", "--csv", "--output", "po"]) == 0
    lines = next(tmp_path.glob("*_po.csv")).read_text().splitlines()
    assert lines[0] == "Host,Port,Plugin ID,Title,Severity,Plugin Output"
    assert len(lines) == 3


def test_missing_nessus_file_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert cli.main(["-s", "--nessus", "absent.nessus", "--csv"]) == 1


def test_nmap_open_ports_stdout(tmp_path, capsys):
    scan = tmp_path / "scan.xml"
    scan.write_text(NMAP_XML)
    assert cli.main(["-s", "--nmap", str(scan), "--stdout"]) == 0
    assert "10.0.0.1 22 " in capsys.readouterr().out.splitlines()


def test_nmap_ips_and_ports_stdout(tmp_path, capsys):
    scan = tmp_path / "scan.xml"
    scan.write_text(NMAP_XML)
    assert cli.main(["-s", "--nmap", str(scan), "--stdout", "--ips", "--ports"]) == 0
    assert capsys.readouterr().out.splitlines() == ["10.0.0.1:22"]


def test_burp_without_js_findings_fails(tmp_path):
    report = tmp_path / "burp.xml"
    report.write_text(BURP_XML)
    assert cli.main(["-s", "--burp", str(report), "--review-js", "--stdout"]) == 1


def test_burp_issues_stdout(tmp_path, capsys):
    report = tmp_path / "burp.xml"
    report.write_text(BURP_XML)
    assert cli.main(["-s", "--burp", str(report), "--stdout"]) == 0
    out = capsys.readouterr().out
    assert "https://app.example.com/" in out
    assert "10.0.0.2" in out


def test_gather_ssh_without_ssh_hosts_fails(tmp_path, monkeypatch):
    (tmp_path / "scan.nessus").write_text(NESSUS_SSL_ONLY)
    monkeypatch.chdir(tmp_path)
    assert cli.main(["-s", "--nessus", "scan.nessus", "--gather-ssh", "--csv"]) == 1


def test_evidence_directory_reports_per_kind(tmp_path, monkeypatch):
    evidence = tmp_path / "evidence"
    evidence.mkdir()
    (evidence / "scan.nessus").write_text(NESSUS_XML)
    (evidence / "scan.xml").write_text(NMAP_XML)
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    monkeypatch.chdir(out_dir)

    assert cli.main(["-s", "--evidence", str(evidence), "--csv", "--output", "ev"]) == 0

    nessus_files = list(out_dir.glob("*_ev_evidence_nessus.csv"))
    nmap_files = list(out_dir.glob("*_ev_evidence_nmap.csv"))
    assert len(nessus_files) == 1
    assert len(nmap_files) == 1
    assert list(out_dir.glob("*_ev_evidence_burp.csv")) == []
    assert len(nessus_files[0].read_text().splitlines()) == 3
    assert nmap_files[0].read_text().splitlines() == ["Host,Port,Algorithm Type,Algorithm"]


def test_evidence_missing_directory_fails(tmp_path):
    assert cli.main(["-s", "--evidence", str(tmp_path / "absent"), "--csv"]) == 1


@pytest.mark.parametrize("flag", ["--unknown", "-nmapx"])
def test_unknown_option_exits(flag):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([flag])
    assert excinfo.value.code == 2