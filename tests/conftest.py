"""In-memory stand-in for the TickeTing API, served through httpx.MockTransport."""

import json
import math

import httpx
import pytest

from ticketing.client import TickeTing
from ticketing.config import ClientConfig

API_KEY = "test-key"

REQUIRED = {
    "regions": ["name", "country"],
    "venues": ["name", "region", "address", "longitude", "latitude"],
    "events": ["name", "venue", "start_time"],
    "accounts": ["first_name", "last_name", "email"],
}
UNIQUE = {
    "regions": ["name"],
    "venues": ["name"],
    "events": [],
    "accounts": ["email"],
}
FILTERABLE = {
    "regions": ["name", "country"],
    "venues": ["region", "name"],
    "events": ["venue", "status", "public"],
    "accounts": ["email"],
}
NOT_ALLOWED = {("accounts", "POST"), ("accounts", "DELETE")}


def _blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _error(status, code=None, message=None, fields=None):
    body = {}
    if code:
        body["code"] = code
    if message:
        body["message"] = message
    if fields:
        body["fields"] = fields
    return httpx.Response(status, json={"error": body})


class FakeTicketingAPI:
    def __init__(self, default_page_size=25):
        self.default_page_size = default_page_size
        self.store = {name: {} for name in REQUIRED}
        self.next_id = 1
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, dict(request.url.params), body))

        if request.headers.get("x-api-key") != API_KEY:
            return _error(401)

        parts = [part for part in request.url.path.split("/") if part][1:]
        resource = parts[0]
        if resource not in self.store:
            return httpx.Response(404, json={"error": {}})
        if (resource, request.method) in NOT_ALLOWED:
            return _error(405)

        if len(parts) == 1:
            if request.method == "GET":
                return self._list(resource, request.url.params)
            if request.method == "POST":
                return self._create(resource, body)
        else:
            record = self.store[resource].get(parts[1])
            if record is None:
                return _error(404, message="There is presently no resource with the given URI.")
            if request.method == "GET":
                return httpx.Response(200, json={"data": record})
            if request.method == "PATCH":
                return self._update(resource, record, body)
            if request.method == "DELETE":
                return self._delete(resource, record)
        return _error(405)

    def seed(self, resource, **fields):
        record = {"id": str(self.next_id), **fields}
        self.next_id += 1
        self.store[resource][record["id"]] = record
        return record

    def last_body(self, method):
        for m, _, _, body in reversed(self.requests):
            if m == method:
                return body
        return None

    def _conflicts(self, resource, fields, exclude=None):
        conflicts = []
        for name in UNIQUE[resource]:
            if name not in fields:
                continue
            for other in self.store[resource].values():
                if other["id"] != exclude and other.get(name) == fields[name]:
                    conflicts.append(name)
                    break
        return conflicts

    def _decorate(self, resource, record):
        if resource == "venues":
            record["map"] = (
                "https://maps.example.com/staticmap?center="
                f"{record['latitude']},{record['longitude']}"
            )
        if resource == "events":
            record.setdefault("status", "draft")

    def _create(self, resource, body):
        body = body or {}
        missing = [name for name in REQUIRED[resource] if _blank(body.get(name))]
        if missing:
            return _error(400, code="bad_data", fields=missing)
        conflicts = self._conflicts(resource, body)
        if conflicts:
            return _error(409, fields=conflicts)
        record = self.seed(resource, **body)
        self._decorate(resource, record)
        return httpx.Response(201, json={"data": record})

    def _update(self, resource, record, body):
        body = body or {}
        missing = [
            name for name in REQUIRED[resource] if name in body and _blank(body[name])
        ]
        if missing:
            return _error(400, code="bad_data", fields=missing)
        conflicts = self._conflicts(resource, body, exclude=record["id"])
        if conflicts:
            return _error(409, fields=conflicts)
        if resource == "events" and record.get("status") == "closed":
            return _error(422, code="cannot_modify")
        record.update(body)
        self._decorate(resource, record)
        return httpx.Response(200, json={"data": record})

    def _delete(self, resource, record):
        if resource == "regions" and any(
            venue.get("region") == record["id"] for venue in self.store["venues"].values()
        ):
            return _error(409, code="in_use")
        del self.store[resource][record["id"]]
        return httpx.Response(204)

    def _list(self, resource, params):
        records = list(self.store[resource].values())

        for name, value in params.items():
            if name in ("page", "per_page", "sort"):
                continue
            if name not in FILTERABLE[resource]:
                return _error(400, code="unsupported_criteria", fields=[name])
            records = [r for r in records if str(r.get(name)).lower() == value.lower()]

        for key in reversed(params.get("sort", "").split(",") if params.get("sort") else []):
            name = key.lstrip("-")
            records.sort(key=lambda r: str(r.get(name, "")), reverse=key.startswith("-"))

        per_page = int(params.get("per_page", self.default_page_size))
        last_page = max(1, math.ceil(len(records) / per_page))
        page = params.get("page", "1")
        page = last_page if page == "last" else int(page)
        if page < 1 or page > last_page:
            return _error(416, code="page_access")

        start = (page - 1) * per_page
        return httpx.Response(
            200,
            json={
                "data": records[start:start + per_page],
                "meta": {
                    "current_page": page,
                    "last_page": last_page,
                    "per_page": per_page,
                    "total": len(records),
                },
            },
        )


@pytest.fixture
def api():
    return FakeTicketingAPI()


@pytest.fixture
def config():
    return ClientConfig(sandbox=True)


@pytest.fixture
def ticketing(api, config):
    return TickeTing(api_key=API_KEY, config=config, http_transport=httpx.MockTransport(api))
