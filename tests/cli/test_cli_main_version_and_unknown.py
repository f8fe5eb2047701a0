import pytest

from catalogrules import cli


def test_main_version_returns_ok_no_systemexit(capsys):
    rc = cli.main(["--version"])
    assert rc == cli.EXIT_OK
    assert "catalogrules" in capsys.readouterr().out


def test_main_without_command_prints_usage(capsys):
    assert cli.main([]) == cli.EXIT_OK
    assert "usage" in capsys.readouterr().out.lower()


def test_main_unknown_flag_raises_systemexit():
    with pytest.raises(SystemExit) as e:
        cli.main(["--no-such-flag"])
    assert e.value.code != 0


def test_eval_requires_kind():
    with pytest.raises(SystemExit):
        cli.main(["eval", "--location-type", "file"])
