#!/usr/bin/env python3
"""
Tests for the FontArchitect command line: argument parsing, API key
resolution and end-to-end runs against a temporary config directory.
"""

import json
import os
import sys
from types import SimpleNamespace

import numpy as np
import pytest
from PIL import Image

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from cli import build_arg_parser, run_cli
from cli import runner
from core import ConfigManager
from core.font_atlas import GlyphIdentifier, parse_fnt


@pytest.fixture
def config(tmp_path):
    return ConfigManager(config_dir=tmp_path / "config")


@pytest.fixture
def sheet_path(tmp_path):
    pixels = np.zeros((40, 80, 4), dtype=np.uint8)
    pixels[5:19, 5:15] = (0, 0, 0, 255)
    pixels[8:20, 30:38] = (0, 0, 0, 255)
    # Dotted i: stem plus a dot two pixels above it
    pixels[10:20, 50:54] = (0, 0, 0, 255)
    pixels[6:8, 51:53] = (0, 0, 0, 255)
    path = tmp_path / "hand_drawn.png"
    Image.fromarray(pixels).save(path)
    return path


@pytest.fixture
def no_env_keys(monkeypatch):
    for names in runner.ENV_VARS.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)


def parse(*argv):
    return build_arg_parser().parse_args(list(argv))


def test_parser_defaults():
    args = parse("sheet.png")

    assert args.sheet == "sheet.png"
    assert args.out is None
    assert not args.identify
    assert not args.repack
    assert args.tolerance is None
    assert args.size == 32
    assert args.base == 24
    assert args.tracking == 0


def test_parser_rejects_unknown_provider():
    with pytest.raises(SystemExit):
        parse("sheet.png", "--provider", "ollama")


def test_missing_sheet_is_usage_error(config):
    assert run_cli(parse(), config) == 2


def test_undecodable_sheet_fails(tmp_path, config):
    bogus = tmp_path / "bogus.png"
    bogus.write_text("nope")
    assert run_cli(parse(str(bogus)), config) == 1


def test_detect_and_print_json(sheet_path, config, capsys):
    assert run_cli(parse(str(sheet_path), "--json"), config) == 0

    glyphs = json.loads(capsys.readouterr().out)
    assert [(g["x"], g["y"], g["width"], g["height"]) for g in glyphs] == [
        (5, 5, 10, 14),
        (30, 8, 8, 12),
        (50, 6, 4, 14),
    ]
    assert [g["yoffset"] for g in glyphs] == [0, 3, 1]


def test_export_with_repack(sheet_path, tmp_path, config):
    out_dir = tmp_path / "export"
    code = run_cli(
        parse(str(sheet_path), "--repack", "-o", str(out_dir), "--tracking", "1"),
        config,
    )

    assert code == 0
    fnt = out_dir / "hand_drawn.fnt"
    png = out_dir / "hand_drawn.png"
    assert fnt.exists() and png.exists()

    doc = parse_fnt(fnt.read_text(encoding="utf-8"))
    assert doc.declared_count == 3
    assert doc.common["scaleW"] == 128
    assert doc.info["face"] == "hand_drawn"
    # Unlabeled glyphs export as id -1; xadvance includes tracking.
    # Packed glyphs are written in id order: the dot of the i was found
    # before the middle block, so the merged i has the smaller id.
    assert [t[0] for t in doc.char_tuples()] == [-1, -1, -1]
    assert [t[7] for t in doc.char_tuples()] == [12, 6, 10]


def test_repack_keeps_reading_order_line_height(tmp_path, config):
    # The tall glyph is found first (lowest id) but reads second
    pixels = np.zeros((40, 80, 4), dtype=np.uint8)
    pixels[0:30, 50:54] = (0, 0, 0, 255)
    pixels[10:20, 0:8] = (0, 0, 0, 255)
    sheet = tmp_path / "tall_first.png"
    Image.fromarray(pixels).save(sheet)

    line_heights = []
    for extra in ([], ["--repack"]):
        out_dir = tmp_path / ("packed" if extra else "plain")
        assert run_cli(parse(str(sheet), "-o", str(out_dir), *extra), config) == 0
        doc = parse_fnt((out_dir / "tall_first.fnt").read_text(encoding="utf-8"))
        line_heights.append(doc.common["lineHeight"])

    # First glyph in reading order is the 8x10 block: 10 + 2
    assert line_heights == [12, 12]


def test_zero_batch_size_is_usage_error(sheet_path, config):
    code = run_cli(
        parse(str(sheet_path), "--identify", "-k", "test-key", "--batch-size", "0"),
        config,
    )
    assert code == 2


def test_config_tolerance_is_used(sheet_path, config, capsys):
    # Alpha 255 never exceeds a tolerance of 255, so nothing is ink
    config.set("tolerance", 255)
    assert run_cli(parse(str(sheet_path), "--json"), config) == 0
    assert json.loads(capsys.readouterr().out) == []

    # The command line wins over config
    assert run_cli(parse(str(sheet_path), "--json", "--tolerance", "20"), config) == 0
    assert len(json.loads(capsys.readouterr().out)) == 3


def test_identify_without_key_is_usage_error(sheet_path, config, no_env_keys):
    assert run_cli(parse(str(sheet_path), "--identify"), config) == 2


def test_identify_labels_exported_glyphs(sheet_path, tmp_path, config, monkeypatch):
    calls = []

    class FakeClient:
        def __init__(self):
            self.messages = SimpleNamespace(create=self.create)

        def create(self, **kwargs):
            calls.append(kwargs)
            return SimpleNamespace(content=[SimpleNamespace(text='["H", "n", "i"]')])

    def make_identifier(provider, api_key, model):
        return GlyphIdentifier(provider=provider, api_key=api_key, model=model, client=FakeClient())

    monkeypatch.setattr(runner, "GlyphIdentifier", make_identifier)

    out_dir = tmp_path / "export"
    code = run_cli(
        parse(str(sheet_path), "--identify", "--provider", "anthropic",
              "-k", "test-key", "-o", str(out_dir)),
        config,
    )

    assert code == 0
    assert len(calls) == 1
    doc = parse_fnt((out_dir / "hand_drawn.fnt").read_text(encoding="utf-8"))
    assert [t[0] for t in doc.char_tuples()] == [ord("H"), ord("n"), ord("i")]


def test_set_key_stores_in_config(config):
    assert run_cli(parse("--set-key", "-k", "abc123", "--provider", "anthropic"), config) == 0

    reloaded = ConfigManager(config_dir=config.config_dir)
    assert reloaded.get_api_key("anthropic") == "abc123"


def test_set_key_without_value_is_usage_error(config):
    assert run_cli(parse("--set-key"), config) == 2


def test_resolve_api_key_priority(tmp_path, config, monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "from-env")
    assert runner.resolve_api_key(None, None, "anthropic", config) == ("from-env", "env:ANTHROPIC_API_KEY")

    config.set_api_key("anthropic", "from-config")
    assert runner.resolve_api_key(None, None, "anthropic", config) == ("from-config", "config")

    key_file = tmp_path / "key.txt"
    key_file.write_text("\n  from-file  \n")
    key, source = runner.resolve_api_key(None, str(key_file), "anthropic", config)
    assert key == "from-file"
    assert source.startswith("file:")

    assert runner.resolve_api_key("from-cli", str(key_file), "anthropic", config) == ("from-cli", "command-line")


def test_legacy_top_level_key_is_migrated(tmp_path):
    config_dir = tmp_path / "legacy"
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps({"gemini_api_key": "old", "tolerance": 30}))

    config = ConfigManager(config_dir=config_dir)

    assert config.get_api_key("gemini") == "old"
    assert config.tolerance == 30
    assert "gemini_api_key" not in json.loads((config_dir / "config.json").read_text())


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
