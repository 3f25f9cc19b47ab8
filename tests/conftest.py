"""Shared pytest fixtures and configuration."""

import pytest
import tempfile
from pathlib import Path

from grok_exporter.settings import Config


VALID_CONFIG_YAML = """\
input:
    type: file
    path: /var/log/exim4/mainlog
    readall: true
grok:
    patterns_dir: /etc/grok/patterns
    patterns:
        - 'EXIM_MESSAGE [a-zA-Z ]*'
metrics:
    - type: counter
      name: exim_rejected_rcpt_total
      help: Total number of rejected recipients, partitioned by error message.
      match: '%{EXIM_DATE} rejected RCPT: %{EXIM_MESSAGE:message}'
      labels:
          - grok_field_name: message
            prometheus_label: error_message
    - type: counter
      name: exim_lines_total
      help: Total number of log lines.
      match: '%{GREEDYDATA}'
      labels: []
server:
    protocol: https
    port: 9443
    cert: /etc/grok/server.crt
    key: /etc/grok/server.key
"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def valid_config_yaml():
    """YAML text of a complete, valid configuration."""
    return VALID_CONFIG_YAML


@pytest.fixture
def metric_dict():
    """A valid metric definition as it appears in YAML."""
    return {
        "type": "counter",
        "name": "exim_rejected_rcpt_total",
        "help": "Total number of rejected recipients.",
        "match": "%{EXIM_MESSAGE:message}",
        "labels": [{"grok_field_name": "message", "prometheus_label": "error_message"}],
    }


@pytest.fixture
def minimal_config_dict(metric_dict):
    """Smallest configuration that passes the checks once defaulted."""
    return {
        "grok": {"patterns": ["EXIM_MESSAGE [a-zA-Z ]*"]},
        "metrics": [metric_dict],
    }


@pytest.fixture
def make_config(minimal_config_dict):
    """Build a defaulted Config from the minimal one with sections replaced."""

    def _make(**sections):
        data = {**minimal_config_dict, **sections}
        return Config.model_validate(data).with_defaults()

    return _make


@pytest.fixture
def write_config(temp_dir):
    """Write YAML text to a config file and return its path."""

    def _write(content: str, name: str = "config.yml") -> Path:
        path = temp_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
