"""Condense Nessus, Nmap and Burp Suite reports into CSV, JSON or terminal findings."""

__version__ = "0.0.7"