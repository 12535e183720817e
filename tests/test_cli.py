"""Tests for the CLI module: arg parsing, exit codes, locales, end-to-end."""

from __future__ import annotations

from pathlib import Path

import pytest

from cslc.cli import CliOptions, build_parser, compile_file, format_summary, main

STYLE = """<?xml version="1.0" encoding="utf-8"?>
<style xmlns="http://purl.org/net/xbiblio/csl" class="note" version="1.0" default-locale="de-DE">
  <info>
    <title>Demo Notes</title>
    <id>http://example.org/styles/demo-notes</id>
    <category citation-format="note"/>
  </info>
  <locale xml:lang="de">
    <terms><term name="and">und</term></terms>
  </locale>
  <macro name="author">
    <names variable="author"><name/></names>
  </macro>
  <citation collapse="year-suffix">
    <layout delimiter="; "><text macro="author"/></layout>
  </citation>
  <bibliography second-field-align="flush">
    <sort><key macro="author"/><key variable="issued" sort="descending"/></sort>
    <layout><text macro="author"/></layout>
  </bibliography>
</style>
"""

LOCALE_FR = """<locale xml:lang="fr-FR">
  <style-options punctuation-in-quote="true"/>
  <terms><term name="and">et</term><term name="in">dans</term></terms>
</locale>
"""


def _options(path: Path, **kwargs) -> CliOptions:
    values = {
        "input_file": path,
        "output_file": None,
        "locale": None,
        "locale_file": None,
        "locale_dirs": [],
        "debug": False,
        "verbose": False,
    }
    values.update(kwargs)
    return CliOptions(**values)


@pytest.fixture
def style_file(tmp_path: Path) -> Path:
    path = tmp_path / "demo.csl"
    path.write_text(STYLE, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_input_only(self) -> None:
        ns = build_parser().parse_args(["apa.csl"])
        assert ns.input == "apa.csl"
        assert ns.output is None
        assert ns.locale is None
        assert ns.locales_dir == []

    def test_output_flag(self) -> None:
        ns = build_parser().parse_args(["apa.csl", "-o", "out.txt"])
        assert ns.output == "out.txt"

    def test_locale_flags(self) -> None:
        ns = build_parser().parse_args(
            ["apa.csl", "-l", "fr-FR", "--locale-file", "fr.xml", "--locales-dir", "a", "--locales-dir", "b"]
        )
        assert ns.locale == "fr-FR"
        assert ns.locale_file == "fr.xml"
        assert ns.locales_dir == ["a", "b"]

    def test_debug_and_verbose(self) -> None:
        ns = build_parser().parse_args(["apa.csl", "--debug", "-v"])
        assert ns.debug is True
        assert ns.verbose is True


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class TestExitCodes:
    def test_success(self, style_file: Path, capsys) -> None:
        assert main([str(style_file)]) == 0
        assert "title: Demo Notes" in capsys.readouterr().out

    def test_missing_file_returns_1(self, tmp_path: Path, capsys) -> None:
        assert main([str(tmp_path / "missing.csl")]) == 1
        assert "error: cannot read style" in capsys.readouterr().err

    def test_parse_error_returns_1(self, tmp_path: Path, capsys) -> None:
        bad = tmp_path / "bad.csl"
        bad.write_text("<style>\n<citation>\n</style>\n")
        assert main([str(bad)]) == 1
        err = capsys.readouterr().err
        assert err.startswith("error:")
        assert "bad.csl:3:" in err

    def test_structure_error_returns_2(self, tmp_path: Path, capsys) -> None:
        bad = tmp_path / "bad.csl"
        bad.write_text("<style>\n  <citation/>\n</style>\n")
        assert main([str(bad)]) == 2
        err = capsys.readouterr().err
        assert "missing its <layout>" in err
        assert "bad.csl:2:3" in err

    def test_option_error_returns_2(self, tmp_path: Path, capsys) -> None:
        bad = tmp_path / "bad.csl"
        bad.write_text(
            "<style><citation><layout/></citation>"
            '<bibliography line-spacing="wide"><layout/></bibliography></style>'
        )
        assert main([str(bad)]) == 2
        assert "line-spacing" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class TestOutput:
    def test_output_file(self, style_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "summary.txt"
        assert main([str(style_file), "-o", str(out)]) == 0
        report = out.read_text()
        assert "citation format: note" in report
        assert "locale: de-DE" in report

    def test_summary_contents(self, style_file: Path) -> None:
        report = format_summary(compile_file(_options(style_file)))
        assert "id: http://example.org/styles/demo-notes" in report
        assert "macros: author" in report
        assert "citation sort: -" in report
        assert "bibliography sort: ascending, descending" in report
        assert "  year-suffix-delimiter = '; '" in report
        assert "  second-field-align = 'flush'" in report
        assert "terms: 1" in report

    def test_debug_dumps_tree(self, style_file: Path, capsys) -> None:
        assert main([str(style_file), "--debug"]) == 0
        err = capsys.readouterr().err
        assert "<style>" in err
        assert "<macro> name='author'" in err


# ---------------------------------------------------------------------------
# Locales
# ---------------------------------------------------------------------------


class TestLocales:
    def test_requested_locale(self, style_file: Path) -> None:
        style = compile_file(_options(style_file, locale="fr-FR"))
        assert style.locale == "fr-FR"
        assert style.terms is None

    def test_locale_file(self, style_file: Path, tmp_path: Path) -> None:
        fr = tmp_path / "fr.xml"
        fr.write_text(LOCALE_FR)
        style = compile_file(_options(style_file, locale="fr-FR", locale_file=fr))
        assert [t.value for t in style.terms] == ["et", "dans"]
        assert style.locale_options["punctuation-in-quote"] == "true"

    def test_locales_dir(self, style_file: Path, tmp_path: Path) -> None:
        locales = tmp_path / "locales"
        locales.mkdir()
        (locales / "locales-fr-FR.xml").write_text(LOCALE_FR)
        style = compile_file(_options(style_file, locale="fr", locale_dirs=[locales]))
        assert {t.value for t in style.terms} == {"et", "dans"}

    def test_locales_dir_style_terms_win(self, style_file: Path, tmp_path: Path) -> None:
        locales = tmp_path / "locales"
        locales.mkdir()
        (locales / "locales-de-DE.xml").write_text(
            '<locale xml:lang="de-DE"><terms><term name="and">and</term><term name="in">in</term></terms></locale>'
        )
        style = compile_file(_options(style_file, locale_dirs=[locales]))
        assert [t.value for t in style.terms] == ["in", "und"]

    def test_locale_not_found_is_not_an_error(self, style_file: Path, tmp_path: Path, caplog) -> None:
        style = compile_file(_options(style_file, locale="ja-JP", locale_dirs=[tmp_path]))
        assert style.terms is None
        assert "no locale file found for ja-JP" in caplog.text

    def test_bad_locale_file_returns_1(self, style_file: Path, tmp_path: Path) -> None:
        bad = tmp_path / "bad.xml"
        bad.write_text("<locale>")
        assert main([str(style_file), "--locale-file", str(bad)]) == 1
