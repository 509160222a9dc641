from __future__ import annotations

from pathlib import Path

import pytest

from mdnotion.core import config as core_config
from mdnotion.core import config_templates


def test_load_toml_reads_tables(tmp_path: Path) -> None:
    path = tmp_path / "settings.toml"
    path.write_text('[logging]\nlevel = "DEBUG"\n', encoding="utf-8")

    assert core_config.load_toml(path) == {"logging": {"level": "DEBUG"}}


def test_load_toml_missing_file(tmp_path: Path) -> None:
    with pytest.raises(core_config.TomlConfigError, match="not found"):
        core_config.load_toml(tmp_path / "absent.toml")


@pytest.mark.parametrize("payload", [b"[logging\n", b"level = \xff\n"])
def test_load_toml_rejects_bad_documents(tmp_path: Path, payload) -> None:
    path = tmp_path / "broken.toml"
    path.write_bytes(payload)

    with pytest.raises(core_config.TomlConfigError, match="parse"):
        core_config.load_toml(path)


def test_overlay_table_returns_merged_copy() -> None:
    defaults = {"paths": {"output_dir": None}, "logging": {"level": "INFO"}}

    merged = core_config.overlay_table(defaults, {"logging": {"level": "ERROR"}})

    assert merged == {"paths": {"output_dir": None}, "logging": {"level": "ERROR"}}
    assert defaults["logging"]["level"] == "INFO"


def test_overlay_table_reports_dotted_unknown_key() -> None:
    defaults = {"delegate": {"enabled": True}}

    with pytest.raises(core_config.TomlConfigError, match="delegate.extra"):
        core_config.overlay_table(defaults, {"delegate": {"extra": 1}})


def test_overlay_table_requires_tables_for_sections() -> None:
    with pytest.raises(core_config.TomlConfigError, match="Expected table"):
        core_config.overlay_table({"logging": {"level": "INFO"}}, {"logging": 1})


def test_env_reader_lookups(tmp_path: Path) -> None:
    reader = core_config.EnvReader(
        {
            "APP_NAME": "  spaced  ",
            "APP_BLANK": "   ",
            "APP_LIST": "md, txt  rst",
            "APP_DIR": str(tmp_path),
        },
        "APP_",
    )

    assert reader.text("NAME") == "spaced"
    assert reader.text("BLANK") is None
    assert reader.text("MISSING") is None
    assert reader.words("LIST") == ["md", "txt", "rst"]
    assert reader.words("BLANK") is None
    assert reader.path("DIR") == tmp_path
    assert reader.path("MISSING") is None


def test_first_set_skips_none_only() -> None:
    assert core_config.first_set(None, False, True) is False
    assert core_config.first_set(None, None) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, True), ("yes", True), (" ON ", True), ("0", False), ("off", False)],
)
def test_parse_bool(value, expected) -> None:
    assert core_config.parse_bool(value) is expected


@pytest.mark.parametrize("value", ["maybe", 1, None])
def test_parse_bool_rejects_other_values(value) -> None:
    with pytest.raises(ValueError):
        core_config.parse_bool(value)


def test_write_toml_template_honours_overwrite(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "config.toml"

    core_config.write_toml_template(target, template="a = 1\n")
    with pytest.raises(core_config.TomlConfigError, match="already exists"):
        core_config.write_toml_template(target, template="a = 2\n")
    core_config.write_toml_template(target, template="a = 2\n", overwrite=True)

    assert target.read_text(encoding="utf-8") == "a = 2\n"


def test_convert_template_is_registered_and_parses(tmp_path: Path) -> None:
    template = config_templates.get_template("convert")
    target = template.write(tmp_path / "convert.toml")

    parsed = core_config.load_toml(target)

    assert set(parsed) == {"paths", "execution", "delegate", "logging"}
    assert [item.name for item in config_templates.iter_templates()] == [
        "convert"
    ]


def test_template_write_refuses_existing_file(tmp_path: Path) -> None:
    target = tmp_path / "convert.toml"
    target.write_text("keep", encoding="utf-8")

    with pytest.raises(config_templates.ConfigTemplateError):
        config_templates.get_template("convert").write(target)
    assert target.read_text(encoding="utf-8") == "keep"


def test_unknown_template_raises() -> None:
    with pytest.raises(config_templates.ConfigTemplateError):
        config_templates.get_template("missing")
