import base64
import json

import pytest

from line_kpi.encode_key import encode_key_file, main

from .sheet_fixtures import FAKE_KEY


@pytest.fixture
def key_file(tmp_path):
    path = tmp_path / "kpi-automation.json"
    path.write_text(json.dumps({"client_email": "bot@kpi.iam.gserviceaccount.com", "private_key": FAKE_KEY}))
    return path


def test_encode_key_file(key_file):
    encoded = encode_key_file(key_file)
    assert base64.b64decode(encoded).decode("utf-8") == key_file.read_text()


def test_encode_rejects_other_json(tmp_path):
    path = tmp_path / "other.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        encode_key_file(path)


def test_main(key_file, capsys):
    assert main([str(key_file)]) == 0
    assert capsys.readouterr().out.strip() == encode_key_file(key_file)


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.json")]) == 1
    assert "Could not encode" in capsys.readouterr().err
