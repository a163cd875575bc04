"""Command line entry point: turn scanner output into findings reports."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime
from typing import Optional, Sequence

from ptforge import burp, helper, nessus, nmap
from ptforge.frame import Frame
from ptforge.reporting import DataSet, ReportOptions, handle_reporting

log = logging.getLogger("ptforge")

VERSION = "0.0.7"

CHANGELOG = [
    "Added:",
    "- Integration with release tags for version checking.",
]


class _Abort(Exception):
    """Stop processing and exit with a failure status."""


def default_output_name(now: datetime) -> str:
    """Build the timestamped base name used for output files."""
    stamp = f"{now:%Y-%m-%d}_{now:%H:%M:%S}_ptForge"
    return stamp.replace("-", "_").replace(":", "-").replace(" ", "_")


def _flag(parser: argparse.ArgumentParser, name: str, dest: str, help_text: str) -> None:
    parser.add_argument(f"-{name}", f"--{name}", dest=dest, action="store_true", help=help_text)


def _option(parser: argparse.ArgumentParser, name: str, dest: str, help_text: str) -> None:
    parser.add_argument(f"-{name}", f"--{name}", dest=dest, default="", metavar="VALUE", help=help_text)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser; every option takes one or two dashes."""
    parser = argparse.ArgumentParser(prog="ptforge", allow_abbrev=False)
    _flag(parser, "review-ssl", "review_ssl",
          "Extract ssl-related findings from a nessus file. Requires --nessus")
    _flag(parser, "review-general", "review_general",
          "Extract some useful informational findings from a nessus file. Requires --nessus")
    _option(parser, "nmap", "nmap", "Parse Nmap XML file")
    _flag(parser, "scripts", "scripts",
          "Get script results from the Nmap file, requires --nmap "
          "(supports ssl-enum-ciphers, ssh2-enum-algos)")
    _option(parser, "nessus", "nessus", "Parse Nessus file")
    _option(parser, "include-ids", "include_ids", "Parse specific plugins from a Nessus file")
    _option(parser, "exclude-ids", "exclude_ids", "Skip specific plugins of a Nessus file")
    _option(parser, "output", "output", "Add decorative text to the output file name.")
    _flag(parser, "addpo", "add_po",
          "Include detailed output (Nessus plugin output/Burp Suite requests and responses)")
    _flag(parser, "csv", "csv", "Output to CSV format")
    _flag(parser, "json", "json", "Output to JSON format")
    _flag(parser, "stdout", "stdout", "Output to stdout")
    _flag(parser, "ips", "ips", "Output IPs")
    _flag(parser, "ports", "ports", "Output ports")
    _flag(parser, "version", "version", "Show ptForge version")
    _option(parser, "burp", "burp", "Extract useful findings from a Burp Suite XML report.")
    _flag(parser, "s", "silent", "Silence all ptForge-related output")
    _flag(parser, "changelog", "changelog", "Show the embedded changelog")
    _flag(parser, "debug", "debug", "Set debug mode output")
    _flag(parser, "dev", "dev", "Trigger dev functionality")
    _option(parser, "evidence", "evidence", "Parse a directory for evidence")
    _flag(parser, "gather-ssh", "gather_ssh",
          "Gather SSH algorithm evidence from Nessus, and create ptForge output")
    _flag(parser, "gather-ssl", "gather_ssl",
          "Gather SSL cipher evidence from Nessus, and create ptForge output")
    _flag(parser, "review-js", "review_js",
          "Extract js-related findings from a Burp Suite XML file. Requires --burp")
    _flag(parser, "update", "update", "Check for available updates.")
    return parser


def _configure_logging(silent: bool, debug: bool) -> None:
    if not any(getattr(h, "_ptforge", False) for h in log.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        handler._ptforge = True  # type: ignore[attr-defined]
        log.addHandler(handler)
    if silent:
        log.setLevel(logging.CRITICAL + 1)
    elif debug:
        log.setLevel(logging.DEBUG)
    else:
        log.setLevel(logging.INFO)


def _report_updates(debug: bool) -> None:
    try:
        latest, behind = helper.check_updates(VERSION, debug)
    except (LookupError, ConnectionError, ValueError) as exc:
        log.debug("update check failed: %s", exc)
        return
    if behind:
        log.warning(
            "Please update to the latest ptForge version. (Latest: %s, Local: v%s)", latest, VERSION
        )
        time.sleep(0.5)
    else:
        log.info("No updates available.")


def _run_burp(args: argparse.Namespace, options: ReportOptions, output_name: str) -> None:
    log.info("Parsing Burp XML Report")
    try:
        report = burp.parse_file(args.burp)
    except (OSError, ValueError) as exc:
        log.error("Failed to parse XML report from Burpsuite. Is it XML? error=%s", exc)
        raise _Abort from exc
    try:
        frame = burp.parse_js_vulns(report) if args.review_js else burp.to_frame(report)
    except burp.NoEntriesError as exc:
        log.error("No findings in the Burp report: %s", exc)
        raise _Abort from exc
    handle_reporting(options, [frame], output_name)


def _run_nmap(args: argparse.Namespace, options: ReportOptions, output_name: str) -> None:
    log.info("Parsing an nmap file")
    try:
        report = nmap.parse_nmap(args.nmap)
    except (OSError, ValueError) as exc:
        log.error("Failed to parse the Nmap file. Is it XML? error=%s", exc)
        raise _Abort from exc
    try:
        frame = nmap.script_output(report) if args.scripts else nmap.open_ports(report)
    except ValueError as exc:
        log.error("Failed to read the Nmap results: %s", exc)
        raise _Abort from exc
    handle_reporting(options, [frame], output_name)


def _load_nessus(filename: str) -> nessus.NessusReport:
    try:
        return nessus.parse_file(filename)
    except (OSError, ValueError) as exc:
        log.error("An error occurred during nessus parsing: %s", exc)
        raise _Abort from exc


def _run_nessus(args: argparse.Namespace, options: ReportOptions, output_name: str) -> None:
    log.info("Beginning Nessus Processing")
    report = _load_nessus(args.nessus)
    if args.review_ssl:
        if not options.output_ips and not options.output_ports:
            log.info("Extracting SSL Related Findings")
        plugins = nessus.filter_plugins(report, nessus.SSL_PLUGIN_LIST, args.exclude_ids)
    elif args.review_general:
        plugins = nessus.filter_plugins(report, nessus.INFO_PLUGIN_LIST, args.exclude_ids)
    else:
        plugins = nessus.filter_plugins(report, args.include_ids, args.exclude_ids)
    log.info("%d plugins processed", len(plugins))
    handle_reporting(options, [nessus.plugins_to_frame(plugins, args.add_po)], output_name)


def _gather(
    report: nessus.NessusReport,
    args: argparse.Namespace,
    options: ReportOptions,
    output_name: str,
) -> None:
    if args.gather_ssh:
        plugins = nessus.filter_plugins(report, nessus.SSH_DETECTION_PLUGIN, "")
        evidence = nmap.gather_ssh(plugins, output_name + "_gatherSSHAlgos")
    else:
        plugins = nessus.filter_plugins(report, nessus.SSL_PLUGIN_LIST, "")
        evidence = nmap.gather_ssl(plugins, output_name + "_gatherSSLCiphers")
    if evidence is None:
        raise _Abort
    try:
        frame = nmap.script_output(nmap.parse_nmap(evidence))
    except (OSError, ValueError) as exc:
        log.error("Failed to read gathered evidence %s: %s", evidence, exc)
        raise _Abort from exc
    handle_reporting(options, [frame], output_name)


def _nessus_frames(
    report: nessus.NessusReport, args: argparse.Namespace
) -> list[Frame]:
    selections = []
    if args.review_ssl:
        selections.append(nessus.SSL_PLUGIN_LIST)
    if args.review_general:
        selections.append(nessus.INFO_PLUGIN_LIST)
    if not selections:
        selections.append("")
    return [
        nessus.plugins_to_frame(nessus.filter_plugins(report, include, ""), args.add_po)
        for include in selections
    ]


def _run_evidence(args: argparse.Namespace, options: ReportOptions, output_name: str) -> None:
    datasets = {name: DataSet(name) for name in ("nessus", "burp", "nmap")}
    try:
        reports = helper.parse_dir(args.evidence)
    except OSError as exc:
        log.error("%s", exc)
        raise _Abort from exc
    log.debug("evidence reports: %s", reports)

    for report in reports:
        if isinstance(report, nmap.NmapReport):
            try:
                datasets["nmap"].frames.append(nmap.script_output(report))
            except ValueError:
                log.error("failed to parse nmap file, moving on")
        elif isinstance(report, burp.BurpReport):
            if args.review_js:
                try:
                    datasets["burp"].frames.append(burp.parse_js_vulns(report))
                except burp.NoEntriesError:
                    log.error("failed to parse burp file, moving on")
        elif isinstance(report, nessus.NessusReport):
            log.debug("Got a Nessus XML Report")
            datasets["nessus"].frames.extend(_nessus_frames(report, args))
            if args.gather_ssh or args.gather_ssl:
                _gather(report, args, options, output_name)
        else:
            log.error("unknown file type for report. Ignoring...")

    for dataset in datasets.values():
        if dataset.frames:
            handle_reporting(options, dataset.frames, f"{output_name}_evidence_{dataset.name}")
        else:
            log.debug("No %s frames to report", dataset.name)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line tool; return the process exit status."""
    args = build_parser().parse_args(argv)
    output_name = default_output_name(datetime.now())
    _configure_logging(args.silent, args.debug)

    options = ReportOptions(
        format_csv=args.csv,
        format_json=args.json,
        format_stdout=args.stdout,
        output_ips=args.ips,
        output_ports=args.ports,
        debug=args.debug,
        version=VERSION,
    )
    log.debug(
        "Reporting info formatCSV=%s formatJSON=%s outputIPs=%s outputPorts=%s",
        args.csv, args.json, args.ips, args.ports,
    )

    if not args.silent and args.update:
        _report_updates(args.debug)

    if args.version:
        print(f"ptForge v{VERSION}")
        return 0

    if args.changelog:
        log.info("Changelog v%s Changes\n%s", VERSION, "\n".join(CHANGELOG))
        log.info("Exiting")
        return 0

    if args.output:
        output_name = f"{output_name}_{args.output}"

    if not (args.csv or args.json or args.stdout):
        log.warning("Missing some form of output, (--csv/--json/--stdout)")

    gathering = args.gather_ssh or args.gather_ssl
    try:
        if args.burp:
            _run_burp(args, options, output_name)
        if args.nmap:
            _run_nmap(args, options, output_name)
        if args.nessus and not gathering:
            _run_nessus(args, options, output_name)
        if gathering and not args.evidence:
            _gather(_load_nessus(args.nessus), args, options, output_name)
        if args.evidence:
            _run_evidence(args, options, output_name)
    except _Abort:
        return 1

    if args.dev:
        log.info("There's nothing here")
        log.debug("Or is there...")

    log.info("Exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())