import json

from opele.__main__ import main


def test_profile_command(capsys):
    assert main(["profile", "0"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["name"] == "Eji Ogbe"
    assert data["index"] == 0


def test_profile_command_wraps_negative(capsys):
    main(["profile", "-1"])
    assert json.loads(capsys.readouterr().out)["index"] == 255


def test_table_command(capsys):
    main(["table"])
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 256
    assert lines[0].split()[-2:] == ["Eji", "Ogbe"]


def test_cast_with_simulated_drop(capsys):
    assert main(["cast", "--rng-seed", "5", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["source"] == "physical"
    assert data["impact"] is True
    assert 0 <= data["seed"] <= 255
    assert data["sign"]["index"] == data["seed"]


def test_cast_without_motion_falls_back(capsys):
    main(["cast", "--gesture", "none", "--rng-seed", "5", "--json"])
    data = json.loads(capsys.readouterr().out)
    assert data["source"] == "fallback"
    assert data["sample_count"] == 0


def test_cast_text_output(capsys):
    main(["cast", "--rng-seed", "1"])
    out = capsys.readouterr().out
    assert "Source: physical" in out
    assert "Chain:" in out
