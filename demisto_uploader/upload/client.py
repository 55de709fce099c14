"""
Minimal client for the Demisto REST API.

Covers the calls the uploader needs: session login/logout, opening an
incident, starting its investigation and adding formatted entries to it.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests

from .. import config
from ..exceptions import ClientError


@dataclass
class User:
    username: str
    name: str = ""
    email: str = ""


@dataclass
class Incident:
    id: str
    version: int
    name: str


@dataclass
class Investigation:
    id: str
    name: str = ""


class DemistoClient:
    def __init__(self,
                 server: str,
                 username: str,
                 password: str,
                 verify: bool = True,
                 session: Optional[requests.Session] = None):
        self.base_url = server.rstrip("/") + "/"
        self.username = username
        self.password = password
        self.session = session or requests.Session()
        self.session.verify = verify
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })
        self.timeout = config.REQUEST_TIMEOUT

    def _send(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> requests.Response:
        url = urljoin(self.base_url, endpoint)
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ClientError(f"{method} {url} failed: {e}") from e

        if not response.ok:
            raise ClientError(f"{method} {url} returned {response.status_code}: {response.text[:200]}")
        return response

    def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        response = self._send(method, endpoint, payload)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ClientError(f"{method} {endpoint} returned invalid JSON: {e}") from e

    def login(self) -> User:
        # The server hands out the XSRF token as a cookie on any page
        self._send("GET", "")
        token = self.session.cookies.get("XSRF-TOKEN")
        if token:
            self.session.headers["X-XSRF-TOKEN"] = token

        data = self._request("POST", "login", {"user": self.username, "password": self.password}) or {}
        user = User(
            username=data.get("username", self.username),
            name=data.get("name", ""),
            email=data.get("email", ""),
        )
        logging.debug(f"Logged in to {self.base_url} as {user.username}")
        return user

    def logout(self):
        self._send("POST", "logout")

    def create_incident(self, name: str) -> Incident:
        payload = {
            "type": config.INCIDENT_TYPE,
            "name": name,
            "status": config.INCIDENT_STATUS,
            "level": config.INCIDENT_LEVEL,
            "targets": [{"value": name, "type": config.INCIDENT_TARGET_TYPE}],
        }
        data = self._request("POST", "incident", payload)
        if not data or "id" not in data:
            raise ClientError(f"Incident {name} was not created: {data!r}")
        return Incident(id=str(data["id"]), version=int(data.get("version", 0)), name=data.get("name", name))

    def investigate(self, incident: Incident) -> Investigation:
        data = self._request("POST", "incident/investigate", {"id": incident.id, "version": incident.version})
        # Some server versions wrap the investigation in a "response" object
        if data and "response" in data:
            data = data["response"]
        if not data or "id" not in data:
            raise ClientError(f"Investigation for incident {incident.id} was not started: {data!r}")
        return Investigation(id=str(data["id"]), name=data.get("name", incident.name))

    def add_entry(self, investigation_id: str, rows: List[Dict[str, Any]], fmt: str) -> Any:
        payload = {
            "investigationId": investigation_id,
            "format": fmt,
            "contents": json.dumps(rows),
        }
        return self._request("POST", "entry/formatted", payload)
