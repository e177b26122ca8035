from __future__ import annotations

import os
from unittest.mock import MagicMock, patch

import pytest

import css_image_embedder
from embed_options import Action


@pytest.fixture
def site(tmp_path):
    (tmp_path / "a.png").write_bytes(b"\x89PNG" + bytes(100))
    css = tmp_path / "styles.css"
    css.write_text(".logo { background: url('a.png'); }\n", encoding="utf-8")
    return tmp_path


def test_parse_arguments_defaults_base_path_to_input_directory(site) -> None:
    options = css_image_embedder.parse_arguments([str(site / "styles.css")])
    assert options.base_path == str(site)
    assert options.input_source == str(site / "styles.css")

    embed_options = options.embed_options()
    assert embed_options.act_on_missing_file is Action.ERROR
    assert [p.pattern for p in embed_options.exclude] == [".*"]


def test_parse_arguments_stdin_uses_cwd() -> None:
    options = css_image_embedder.parse_arguments(["-", "-i", r"\.png$", "--on-large", "error"])
    assert options.input_source is None
    assert options.base_path == os.getcwd()
    assert options.embed_options().act_on_large_file is Action.ERROR


@pytest.mark.parametrize("argv", [
    ["--overwrite"],
    ["styles.css", "--backup", "-o", "out.css"],
    ["styles.css", "-i", "("],
    ["styles.css", "--max-size", "-1"],
])
def test_parse_arguments_rejects_bad_combinations(argv) -> None:
    with pytest.raises(SystemExit):
        css_image_embedder.parse_arguments(argv)


def test_main_writes_output_file(site, capsys) -> None:
    out = site / "out" / "styles.css"

    code = css_image_embedder.main([str(site / "styles.css"), "-i", r"\.png$", "-o", str(out)])

    assert code == 0
    assert out.read_text(encoding="utf-8").startswith('.logo { background: url("data:image/png;base64,')
    assert capsys.readouterr().err == ""


def test_main_writes_stdout_and_reports_warnings(site, capsys) -> None:
    (site / "styles.css").write_text("a { background: url(a.png); } b { background: url(a.png); }", encoding="utf-8")

    code = css_image_embedder.main([str(site / "styles.css"), "-i", r"\.png$"])

    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.count("data:image/png;base64,") == 2
    assert "WARNING: Image file a.png is encoded more than once" in captured.err
    assert "wasted" in captured.err


def test_main_does_not_write_when_errors_occur(site, capsys) -> None:
    (site / "styles.css").write_text("a { background: url(missing.png); }", encoding="utf-8")
    out = site / "out.css"

    code = css_image_embedder.main([str(site / "styles.css"), "-i", r"\.png$", "-o", str(out)])

    err = capsys.readouterr().err
    assert code == 1
    assert not out.exists()
    assert "ERROR: Image file missing.png is missing" in err
    assert "finished with 1 errors" in err


def test_main_quiet_hides_warnings(site, capsys) -> None:
    (site / "styles.css").write_text("a { background: url(gone.png); }", encoding="utf-8")

    code = css_image_embedder.main([str(site / "styles.css"), "-i", r"\.png$", "--on-missing", "warn", "-Q"])

    captured = capsys.readouterr()
    assert code == 0
    assert captured.out == 'a { background: url("gone.png"); }'
    assert captured.err == ""


def test_main_backup_keeps_original(site) -> None:
    css = site / "styles.css"
    original = css.read_text(encoding="utf-8")

    code = css_image_embedder.main([str(css), "-i", r"\.png$", "--backup", "--original-as-comment"])

    assert code == 0
    assert (site / "styles.css.bak").read_text(encoding="utf-8") == original
    assert "/*a.png*/ url(\"data:image/png;base64," in css.read_text(encoding="utf-8")


def test_main_log_file_receives_info(site) -> None:
    log_file = site / "run.log"

    code = css_image_embedder.main([str(site / "styles.css"), "-i", r"\.png$", "--overwrite", "-l", str(log_file)])

    assert code == 0
    assert "Embedding a.png" in log_file.read_text(encoding="utf-8")


def test_main_reads_remote_stylesheet(site, capsys) -> None:
    response = MagicMock(status_code=200, encoding="utf-8", text="a { background: url(a.png); }", content=b"x")

    with patch("http_client.requests.get", return_value=response) as get:
        code = css_image_embedder.main(["https://example.com/site.css", "-p", str(site), "-i", r"\.png$"])

    assert code == 0
    get.assert_called_once_with("https://example.com/site.css", timeout=30)
    assert capsys.readouterr().out.startswith('a { background: url("data:image/png;base64,')


def test_main_reports_missing_input(tmp_path, capsys) -> None:
    code = css_image_embedder.main([str(tmp_path / "nope.css")])
    assert code == 1
    assert "Error processing" in capsys.readouterr().err


def test_main_debug_log_file_includes_encoder_lines(site) -> None:
    log_file = site / "debug.log"

    code = css_image_embedder.main([str(site / "styles.css"), "-i", r"\.png$", "-o", str(site / "out.css"),
                                    "-d", "-l", str(log_file)])

    assert code == 0
    assert "Encoding " in log_file.read_text(encoding="utf-8")
