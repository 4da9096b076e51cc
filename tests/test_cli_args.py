"""
Test CLI argument parsing, TOML defaults and validation.
"""

import sys

import pytest

from sharespider import cli
from sharespider.config import build_parser, load_config, log_format_arg, validate_args
from sharespider.config_model import EnumerationPolicy, LogFormat


@pytest.fixture
def no_config_files(tmp_path, monkeypatch):
    """Run from an empty directory with an empty HOME so no TOML is picked up."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


def parse(*argv):
    return build_parser().parse_args(list(argv))


# ============================================================================
# Test: parser
# ============================================================================


class TestParser:
    """Tests for build_parser defaults and flags"""

    def test_defaults(self, no_config_files):
        args = parse("-t", "10.0.0.5")

        assert args.spider is False
        assert args.show_files is False
        assert args.profiles_only is True
        assert args.max_depth == 999
        assert args.log_spider is LogFormat.ONELINE
        assert args.threads == 1
        assert args.timeout == 10
        assert args.loot_dir == "sharespider_loot"

    def test_spider_flags(self, no_config_files):
        args = parse("-t", "h", "--spider", "--show-files", "--no-profiles-only", "--max-depth", "2", "--log-spider", "csv")

        policy = EnumerationPolicy.from_args(args)

        assert policy == EnumerationPolicy(
            spider_shares=True,
            show_files=True,
            spider_profiles_only=False,
            max_depth=2,
            log_format=LogFormat.CSV,
        )

    @pytest.mark.parametrize("value,expected", [("0", LogFormat.NONE), ("2", LogFormat.TABLE), ("oneline", LogFormat.ONELINE)])
    def test_log_spider_values(self, no_config_files, value, expected):
        assert parse("-t", "h", "--log-spider", value).log_spider is expected

    def test_log_spider_rejects_unknown(self, no_config_files):
        with pytest.raises(SystemExit):
            parse("-t", "h", "--log-spider", "xml")

    def test_log_format_arg_error_type(self):
        import argparse

        with pytest.raises(argparse.ArgumentTypeError):
            log_format_arg("9")

    def test_once_only(self, no_config_files):
        with pytest.raises(SystemExit):
            parse("-u", "alice", "-u", "bob")

    def test_help_lists_spider_options(self, no_config_files, capsys, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["sharespider", "--help"])

        with pytest.raises(SystemExit):
            cli.main()

        output = capsys.readouterr().out
        assert "--spider" in output
        assert "--max-depth" in output
        assert "--log-spider" in output
        assert "SPIDER OPTIONS" in output


# ============================================================================
# Test: TOML defaults
# ============================================================================


class TestLoadConfig:
    """Tests for load_config"""

    def test_no_file(self, no_config_files):
        assert load_config() == {}

    def test_config_dir_file(self, no_config_files):
        (no_config_files / "config").mkdir()
        (no_config_files / "config" / "sharespider.toml").write_text(
            '[authentication]\nusername = "alice"\ndomain = "corp.local"\n'
            "[target]\nthreads = 8\n"
            '[spider]\nshares = true\nmax_depth = 3\nlog_format = "table"\nprofiles_only = false\n'
            '[output]\nloot_dir = "/tmp/loot"\n'
        )

        defaults = load_config()

        assert defaults == {
            "username": "alice",
            "domain": "corp.local",
            "threads": 8,
            "spider": True,
            "max_depth": 3,
            "log_spider": LogFormat.TABLE,
            "profiles_only": False,
            "loot_dir": "/tmp/loot",
        }

    def test_defaults_feed_parser(self, no_config_files):
        (no_config_files / "config").mkdir()
        (no_config_files / "config" / "sharespider.toml").write_text("[spider]\nshares = true\nlog_format = 1\n")

        args = parse("-t", "h")

        assert args.spider is True
        assert args.log_spider is LogFormat.CSV

    def test_cli_overrides_file(self, no_config_files):
        (no_config_files / "config").mkdir()
        (no_config_files / "config" / "sharespider.toml").write_text("[spider]\nmax_depth = 3\n")

        assert parse("-t", "h", "--max-depth", "7").max_depth == 7

    def test_bad_log_format_ignored(self, no_config_files, capsys):
        (no_config_files / "config").mkdir()
        (no_config_files / "config" / "sharespider.toml").write_text('[spider]\nlog_format = "xml"\n')

        assert "log_spider" not in load_config()
        assert "Ignoring spider.log_format" in capsys.readouterr().out

    def test_cwd_file_warns(self, no_config_files, capsys):
        (no_config_files / "sharespider.toml").write_text('[authentication]\nusername = "alice"\n')

        assert load_config() == {"username": "alice"}
        assert "WARNING" in capsys.readouterr().out


# ============================================================================
# Test: validate_args
# ============================================================================


class TestValidateArgs:
    """Tests for validate_args"""

    def test_valid(self, no_config_files):
        validate_args(parse("-t", "10.0.0.5", "-u", "alice", "-p", "x", "-d", "corp"))

    def test_null_session_allowed(self, no_config_files):
        validate_args(parse("-t", "10.0.0.5"))

    def test_missing_targets(self, no_config_files):
        with pytest.raises(SystemExit):
            validate_args(parse("-u", "alice", "-p", "x"))

    def test_missing_targets_file(self, no_config_files):
        with pytest.raises(SystemExit):
            validate_args(parse("--targets-file", "nope.txt"))

    def test_username_without_secret(self, no_config_files):
        with pytest.raises(SystemExit):
            validate_args(parse("-t", "10.0.0.5", "-u", "alice"))

    def test_negative_depth(self, no_config_files):
        with pytest.raises(SystemExit):
            validate_args(parse("-t", "10.0.0.5", "--max-depth", "-1"))

    def test_zero_threads(self, no_config_files):
        with pytest.raises(SystemExit):
            validate_args(parse("-t", "10.0.0.5", "--threads", "0"))

    def test_kerberos_rejects_ip_targets(self, no_config_files):
        with pytest.raises(SystemExit):
            validate_args(parse("-t", "fs01.corp.local,10.0.0.5", "-u", "alice", "-k"))


# ============================================================================
# Test: cli helpers / main
# ============================================================================


class TestCli:
    """Tests for target collection and main()"""

    def test_collect_targets(self, no_config_files):
        targets_file = no_config_files / "targets.txt"
        targets_file.write_text("# lab\nfs01\n10.0.0.5\n\n10.0.1.0/30\n")
        args = parse("-t", "10.0.0.5,dc01", "--targets-file", str(targets_file), "-d", "corp.local")

        targets = cli.collect_targets(args)

        assert targets == ["10.0.0.5", "dc01.corp.local", "fs01.corp.local", "10.0.1.1", "10.0.1.2"]

    def test_build_auth(self, no_config_files):
        auth = cli.build_auth(parse("-t", "h", "-u", "alice", "--hashes", ":abcd", "-d", "corp", "--timeout", "4"))

        assert auth.username == "alice"
        assert auth.ntlm_hashes() == ("", "abcd")
        assert auth.timeout == 4
        assert not auth.use_kerberos

    def test_run_wires_engine(self, no_config_files, mocker):
        mock_runner = mocker.patch("sharespider.cli.AsyncRunner")
        mock_runner.return_value.run.return_value = []
        mocker.patch("sharespider.cli.print_summary_table")

        failed = cli.run(parse("-t", "10.0.0.5", "--spider", "--threads", "3"))

        assert failed == 0
        config = mock_runner.call_args.args[0]
        assert config.workers == 3
        run_call = mock_runner.return_value.run.call_args
        assert run_call.args[0] == ["10.0.0.5"]
        assert run_call.args[1] is cli.process_target
        assert run_call.kwargs["policy"].spider_shares is True

    def test_keyboard_interrupt_exits_130(self, no_config_files, mocker, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["sharespider", "-t", "10.0.0.5"])
        mocker.patch("sharespider.cli.run", side_effect=KeyboardInterrupt)

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 130
