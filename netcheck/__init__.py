"""
Netcheck - TCP/UDP Connectivity Diagnostic Tools

A small suite of command-line tools for ad-hoc connectivity testing
between two hosts: a TCP echo listener, a TCP probe client, a UDP
listener and a UDP sender.
"""

__version__ = "1.0.0"
__author__ = "Network Team"
