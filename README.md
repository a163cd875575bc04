# ptforge

ptforge reads scanner output from a penetration test and reduces it to the
findings that matter, written as CSV, JSON or plain lines on stdout.

It understands:

- **Nessus** `.nessus` files: filter plugins by ID, or pull out SSL/TLS
  or general informational findings.
- **Nmap** XML files: list reported ports, or extract weak SSH algorithms
  (`ssh2-enum-algos`) and weak TLS 1.0–1.2 ciphers (`ssl-enum-ciphers`).
- **Burp Suite** XML issue exports: list issues, or pull out the CVEs
  reported against vulnerable JavaScript libraries.

## Installation

```
pip install .
```

The package has no runtime dependencies. The `--gather-ssh` and
`--gather-ssl` options run `nmap`, which must be on your `PATH`.

## Usage

Choose at least one output format: `--csv`, `--json` or `--stdout`
(a warning is logged otherwise). Output files are named after the current
date and time, for example `2024_05_01_13-45-10_ptForge.csv`;
`--output NAME` appends `_NAME` to that base name. Every option may be
written with one or two dashes.

```
ptforge --nessus scan.nessus --review-ssl --csv
ptforge --nessus scan.nessus --include-ids "10267 10107" --json
ptforge --nessus scan.nessus --stdout --ips --ports
ptforge --nmap scan.xml --scripts --csv
ptforge --burp issues.xml --review-js --json
ptforge --evidence ./evidence --review-ssl --csv
ptforge --nessus scan.nessus --gather-ssh --csv
```

Other options:

| Option | Meaning |
| --- | --- |
| `--exclude-ids "ID ..."` | Drop these Nessus plugin IDs (ignored together with `--include-ids`: nothing is selected) |
| `--review-general` | Extract useful informational Nessus findings |
| `--addpo` | Include Nessus plugin output as an extra column |
| `--ips --ports` | With `--stdout`, print only `host:port` lines, skipping port 0 |
| `-s` | Silence log output |
| `--debug` | Verbose logging |
| `--update` | Check for a newer release tag |
| `--version`, `--changelog` | Show version information |
| `--dev` | Development switch; does nothing useful |

`--evidence DIR` parses every file of a directory as Nmap, Burp or Nessus
XML and writes one report per kind (`..._evidence_nessus`,
`..._evidence_burp`, `..._evidence_nmap`). Burp files contribute only with
`--review-js`.

`--gather-ssh` / `--gather-ssl` take the hosts and ports of the relevant
Nessus findings, run `nmap` with `ssh2-enum-algos` or `ssl-enum-ciphers`
against them, keep the nmap XML next to the report and report the weak
algorithms it finds.

## Update check

`--update` reads a JSON list of release tags from the URL in the
`PTFORGE_TAGS_URL` environment variable and compares the newest tag name
with `v0.0.7`. Without that variable, or when the fetch fails, the check is
skipped silently (details appear with `--debug`).

## Library use

The parsers are usable on their own:

```python
from ptforge import nessus

report = nessus.parse_file("scan.nessus")
plugins = nessus.filter_plugins(report, "10267", "")
frame = nessus.plugins_to_frame(plugins, False)
print(frame.to_csv())
```

Modules:

- `ptforge.nessus` — `parse_file`, `parse_xml`, `process_filter`,
  `filter_plugins`, `plugins_to_frame`.
- `ptforge.nmap` — `parse_nmap`, `parse_xml`, `open_ports`,
  `script_output`, `gather_ssh`, `gather_ssl`.
- `ptforge.burp` — `parse_file`, `parse_xml`, `to_frame`,
  `parse_js_vulns` (raises `NoEntriesError` when no CVE is found).
- `ptforge.weak_algorithms` — `is_weak(category, value)` and
  `column_label(key)`.
- `ptforge.frame` — `Frame`, a small table with `from_records`, `select`,
  `concat`, `column`, `to_csv` and `to_json`.
- `ptforge.reporting` — `ReportOptions` and
  `handle_reporting(options, frames, output_name)`, which prints and writes
  the files and returns their paths.
- `ptforge.helper` — `parse_dir`, `contains_any`, `check_updates`.