import pytest
from pathlib import Path
from demisto_uploader.settings import Settings
from demisto_uploader.upload.cases import DryRunCaseSink

ONE_BYTES = b"first evidence file\n"
TWO_BYTES = bytes(range(256)) * 300

@pytest.fixture
def case_tree(tmp_path):
    """root/caseA/ holding two files of known content."""
    root = tmp_path / "root"
    case_a = root / "caseA"
    case_a.mkdir(parents=True)
    (case_a / "one.txt").write_bytes(ONE_BYTES)
    (case_a / "two.bin").write_bytes(TWO_BYTES)
    return root

@pytest.fixture
def settings_for():
    """Builds dry-run Settings for a root, with overrides."""
    def _make(root: Path, **overrides) -> Settings:
        values = dict(root=root, dry_run=True, verbose=True)
        values.update(overrides)
        return Settings(**values)
    return _make

@pytest.fixture
def sink():
    return DryRunCaseSink()
