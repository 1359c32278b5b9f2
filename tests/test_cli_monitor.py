from pipeline.cli_monitor import main

OLD_HTML = '<h3 id="s1">Title</h3><p>Old body</p>'
NEW_HTML = '<h3 id="s1">Title</h3><p>New body</p>'


def _write_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "document:\n"
        "  name: Terms\n"
        "  target_url: https://example.com/terms.html\n"
        "diff:\n"
        "  provider: difflib\n"
    )
    return path


def test_dry_run_prints_report(tmp_path, clean_env, capsys):
    clean_env.setenv("GAS_SHARED_SECRET", "abc")
    clean_env.setenv("GAS_WEBHOOK_URL", "https://hook.example/exec")
    source = tmp_path / "current.html"
    source.write_text(NEW_HTML)
    snapshot = tmp_path / "snapshot.txt"
    snapshot.write_text(OLD_HTML)

    code = main(
        [
            "--config", str(_write_config(tmp_path)),
            "--env_file", str(tmp_path / "missing.env"),
            "--source_file", str(source),
            "--snapshot", str(snapshot),
            "--dry_run",
        ]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "===== s1 =====" in out
    assert "- https://example.com/terms.html#s1" in out
    assert snapshot.read_text() == OLD_HTML


def test_missing_secrets_exit_non_zero(tmp_path, clean_env):
    code = main(
        [
            "--config", str(_write_config(tmp_path)),
            "--env_file", str(tmp_path / "missing.env"),
            "--dry_run",
        ]
    )

    assert code == 1


def test_snapshot_write_failure_exits_non_zero(tmp_path, clean_env):
    clean_env.setenv("GAS_SHARED_SECRET", "abc")
    clean_env.setenv("GAS_WEBHOOK_URL", "https://hook.example/exec")
    source = tmp_path / "current.html"
    # no keyed sections, so nothing is delivered before the snapshot write
    source.write_text("<p>no sections yet</p>")
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    code = main(
        [
            "--config", str(_write_config(tmp_path)),
            "--env_file", str(tmp_path / "missing.env"),
            "--source_file", str(source),
            "--snapshot", str(blocker / "snapshot.txt"),
        ]
    )

    assert code == 1
