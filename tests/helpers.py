"""Builders for check-run payloads and HTTP responses used across tests."""

import json

import requests

from ghchecks.domain import CheckRun, CheckRunPage


class FakeClock:
    """Clock whose time only moves when sleep() is called."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def run_data(run_id, name=None, status="completed", conclusion="success", **extra):
    """One entry as it appears in the GitHub check-runs listing."""
    data = {
        "id": run_id,
        "name": name or f"check-{run_id}",
        "status": status,
        "conclusion": conclusion if status == "completed" else None,
        "details_url": f"https://ci.example.com/{run_id}",
        "html_url": f"https://github.com/octocat/hello-world/runs/{run_id}",
        "started_at": "2024-05-01T10:00:00Z",
        "completed_at": "2024-05-01T10:01:05Z" if status == "completed" else None,
    }
    data.update(extra)
    return data


def make_run(run_id, name=None, status="completed", conclusion="success"):
    return CheckRun.from_api_response(run_data(run_id, name, status, conclusion))


def make_page(*runs, next_page_token=None):
    return CheckRunPage(runs=tuple(runs), total_count=len(runs),
                        next_page_token=next_page_token)


def make_response(status=200, body=None, headers=None, next_url=None, url=None):
    """A real requests.Response with the given status, JSON body and headers."""
    response = requests.Response()
    response.status_code = status
    response.url = url or "https://api.github.com/test"
    if body is not None:
        response._content = json.dumps(body).encode('utf-8')
        response.headers['Content-Type'] = 'application/json'
    else:
        response._content = b''
    response.encoding = 'utf-8'
    response.headers.update(headers or {})
    if next_url:
        response.headers['Link'] = f'<{next_url}>; rel="next"'
    return response


def check_runs_body(*runs, total_count=None):
    return {
        "total_count": len(runs) if total_count is None else total_count,
        "check_runs": list(runs),
    }
