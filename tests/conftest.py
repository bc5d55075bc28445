"""Shared fixtures: a recording stand-in for run_shell_command."""

import pytest


class RecordingRunner:
    """Records (command, fingerprint, cwd) and replays canned responses.

    A response may be a string, an exception instance (raised), or a list
    of those consumed one per call.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def __call__(self, command, fingerprint=None, cwd=None, env=None):
        self.calls.append((command, fingerprint, cwd))
        response = self.responses.get(command, "")
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def commands(self):
        return [c[0] for c in self.calls]

    @property
    def fingerprints(self):
        return [c[1] for c in self.calls]


@pytest.fixture
def recording_runner():
    return RecordingRunner
