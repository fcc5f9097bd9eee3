import json
from datetime import datetime, timezone


def utc(y, m, d, h=0):
    return datetime(y, m, d, h, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, status_code=200, text="", payload=None):
        if payload is not None:
            text = json.dumps(payload)
        self.status_code = status_code
        self.text = text


class FakeSession:
    """Stands in for requests.Session; replays queued responses/exceptions in order."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []
        self.headers = {}

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if not self.responses:
            raise AssertionError(f"unexpected request: {url}")
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r

    def close(self):
        pass


def bls_payload(points, status="REQUEST_SUCCEEDED"):
    """points: iterable of (year, month, value)."""
    return {
        "status": status,
        "responseTime": 120,
        "message": [],
        "Results": {
            "series": [
                {
                    "seriesID": "CUUR0000SA0",
                    "data": [
                        {"year": str(y), "period": f"M{m:02d}", "periodName": "x", "value": str(v), "footnotes": [{}]}
                        for (y, m, v) in points
                    ],
                }
            ]
        },
    }


def ok_response(points):
    return FakeResponse(200, payload=bls_payload(points))
