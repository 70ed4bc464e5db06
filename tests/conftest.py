"""Shared test fixtures for all test modules."""

import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """
    Point HOME at a temporary directory and clear VSLPARSER_* variables.

    Keeps the CLI's log file and default config lookup out of the real
    home directory, and keeps the developer's environment from leaking
    into configuration tests.
    """
    import os

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in list(os.environ):
        if name.startswith("VSLPARSER_"):
            monkeypatch.delenv(name)
    return home


@pytest.fixture
def sample_log():
    """Two transactions as varnishlog -g request prints them."""
    return (
        "*   << Request  >> 32770\n"
        "-   Begin          req 32769 rxreq\n"
        "-   ReqMethod      GET\n"
        "-   ReqURL         /index.html\n"
        "-   ReqHeader      Host: example.com\n"
        "-   RespStatus     200\n"
        "-   End\n"
        "\n"
        "*   << BeReq    >> 32771\n"
        "-   Begin          bereq 32770 fetch\n"
        "-   BereqMethod    GET\n"
        "-   BereqURL       /index.html\n"
        "-   BerespHeader   Content-Type: text/html\n"
        "-   BerespHeader   Content-Length: 512\n"
        "-   End\n"
        "\n"
    )
