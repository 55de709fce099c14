import logging

import pytest

from demisto_uploader import main as cli
from demisto_uploader.exceptions import ClientError
from demisto_uploader.settings import Settings
from demisto_uploader.upload.client import Incident, Investigation, User


class FakeClient:
    instances = []

    def __init__(self, server, username, password, verify=True):
        self.server = server
        self.verify = verify
        self.entries = []
        self.logged_out = False
        FakeClient.instances.append(self)

    def login(self):
        return User(username="analyst", name="A", email="a@corp")

    def logout(self):
        self.logged_out = True

    def create_incident(self, name):
        return Incident(id=f"id-{name}", version=1, name=name)

    def investigate(self, incident):
        return Investigation(id=f"inv-{incident.id}")

    def add_entry(self, investigation_id, rows, fmt):
        self.entries.append((investigation_id, rows, fmt))


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_client(monkeypatch):
    FakeClient.instances = []
    monkeypatch.setattr(cli, "DemistoClient", FakeClient)
    return FakeClient


def test_parse_args_defaults(monkeypatch):
    monkeypatch.delenv("DEMISTO_USERNAME", raising=False)
    args = cli.parse_args([])
    assert args.folder == "."
    assert args.verbose is True
    assert args.limit == -1
    assert args.test is False


def test_credentials_fall_back_to_environment(monkeypatch):
    monkeypatch.setenv("DEMISTO_USERNAME", "env-user")
    args = cli.parse_args(["--no-verbose", "-vv"])
    assert args.username == "env-user"
    assert args.verbose is False
    assert args.extra_verbose is True


def test_settings_are_immutable(tmp_path):
    settings = Settings.from_args(cli.parse_args(["--test", "-f", str(tmp_path)]))
    with pytest.raises(AttributeError):
        settings.limit = 5


@pytest.mark.parametrize(
    "argv,message",
    [
        (["-p", "pw", "-s", "https://d"], "username"),
        (["-u", "me", "-s", "https://d"], "password"),
        (["-u", "me", "-p", "pw"], "server"),
        (["--test", "--regex", "("], "Invalid regex"),
        (["--test", "-f", "/does/not/exist"], "does not exist"),
    ],
)
def test_fatal_configuration_exits_non_zero(monkeypatch, argv, message, capsys):
    for var in ("DEMISTO_USERNAME", "DEMISTO_PASSWORD", "DEMISTO_SERVER"):
        monkeypatch.delenv(var, raising=False)

    with pytest.raises(SystemExit) as exc:
        cli.main(argv)

    assert exc.value.code == 1
    assert message in capsys.readouterr().err


def test_dry_run_exits_zero(case_tree):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--test", "-f", str(case_tree)])
    assert exc.value.code == 0


def test_upload_run_logs_in_uploads_and_logs_out(fake_client, case_tree):
    with pytest.raises(SystemExit) as exc:
        cli.main(["-u", "me", "-p", "pw", "-s", "https://d", "--insecure", "-f", str(case_tree)])

    assert exc.value.code == 0
    client = fake_client.instances[0]
    assert client.verify is False
    assert client.logged_out
    assert len(client.entries) == 1
    investigation_id, rows, fmt = client.entries[0]
    assert investigation_id == "inv-id-caseA"
    assert fmt == "table"
    assert [r["Type"] for r in rows][:2] == ["Folder", "text/plain"]
    assert len(rows) == 3


def test_fixed_investigation(fake_client, case_tree):
    with pytest.raises(SystemExit):
        cli.main(["-u", "me", "-p", "pw", "-s", "https://d", "--investigation", "42", "-f", str(case_tree)])

    assert fake_client.instances[0].entries[0][0] == "42"


def test_login_failure_is_fatal(monkeypatch, fake_client, case_tree):
    def refuse(self):
        raise ClientError("401 Unauthorized")

    monkeypatch.setattr(FakeClient, "login", refuse)

    with pytest.raises(SystemExit) as exc:
        cli.main(["-u", "me", "-p", "pw", "-s", "https://d", "-f", str(case_tree)])
    assert exc.value.code == 1
    assert not fake_client.instances[0].logged_out


def test_logout_failure_is_fatal(monkeypatch, fake_client, case_tree):
    def refuse(self):
        raise ClientError("session expired")

    monkeypatch.setattr(FakeClient, "logout", refuse)

    with pytest.raises(SystemExit) as exc:
        cli.main(["-u", "me", "-p", "pw", "-s", "https://d", "-f", str(case_tree)])
    assert exc.value.code == 1


def test_run_error_is_not_masked_by_logout_failure(monkeypatch, fake_client, case_tree, capsys):
    def crash(self):
        raise RuntimeError("walker crashed")

    def refuse(self):
        raise ClientError("session expired")

    monkeypatch.setattr(cli.UploaderApp, "run", crash)
    monkeypatch.setattr(FakeClient, "logout", refuse)

    with pytest.raises(RuntimeError, match="walker crashed"):
        cli.main(["-u", "me", "-p", "pw", "-s", "https://d", "-f", str(case_tree)])

    assert "Unable to logout - session expired" in capsys.readouterr().err
