import pytest

from uciclient.engine.metadata import EngineInfo, UciOption, parse_option_line


def test_parse_spin_option():
    option = parse_option_line("option name Hash type spin default 16 min 1 max 33554432")
    assert option == UciOption(name="Hash", type="spin", default="16", min_value=1, max_value=33554432)


def test_parse_multi_word_name_and_combo_vars():
    option = parse_option_line(
        "option name Analysis Contempt type combo default Both var Off var White var Black var Both"
    )
    assert option.name == "Analysis Contempt"
    assert option.type == "combo"
    assert option.default == "Both"
    assert option.choices == ["Off", "White", "Black", "Both"]


def test_parse_button_and_string_options():
    button = parse_option_line("option name Clear Hash type button")
    assert button.type == "button"
    assert button.default is None

    path = parse_option_line("option name SyzygyPath type string default <empty>")
    assert path.default == "<empty>"


@pytest.mark.parametrize("line", ["option type spin", "id name Foo", "option name", "option name type check"])
def test_invalid_declarations(line):
    with pytest.raises(ValueError):
        parse_option_line(line)


def test_engine_info_is_read_only():
    options = {"Hash": "option name Hash type spin default 16 min 1 max 1024"}
    info = EngineInfo(name="Foo", author="Bar", options=options)
    options["Threads"] = "option name Threads type spin default 1 min 1 max 512"

    assert list(info.options) == ["Hash"]
    with pytest.raises(TypeError):
        info.options["Threads"] = "x"
    with pytest.raises(AttributeError):
        info.name = "Other"


def test_engine_info_option_lookup():
    info = EngineInfo(
        name="Foo",
        options={"Ponder": "option name Ponder type check default false"},
    )
    assert info.author == "Unknown"
    assert info.option("Ponder").default == "false"
    with pytest.raises(ValueError):
        info.option("Hash")


def test_engine_info_str():
    assert str(EngineInfo(name="Foo", author="Bar")) == "Engine: Foo by Bar\nOptions: None"
