import pytest

from alephb.engines.base import ChatMessage, GenerationError, GenerationResult
from alephb.prompts import build_chat_messages, to_pipeline_messages


def test_messages_are_system_then_user():
    messages = build_chat_messages("sys", "usr")

    assert messages == [ChatMessage("system", "sys"), ChatMessage("user", "usr")]
    assert to_pipeline_messages(messages) == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "usr"},
    ]


def test_result_keeps_turn_order():
    result = GenerationResult.from_pipeline_output(
        [
            {
                "generated_text": [
                    {"role": "system", "content": "s"},
                    {"role": "user", "content": "u"},
                    {"role": "assistant", "content": "a"},
                ]
            }
        ]
    )

    assert [turn.role for turn in result.generated_turns] == ["system", "user", "assistant"]
    assert result.last_text == "a"


@pytest.mark.parametrize(
    "output",
    [
        [],
        None,
        [{"text": "x"}],
        [{"generated_text": []}],
        [{"generated_text": ["x"]}],
        [{"generated_text": [{"role": "assistant"}]}],
    ],
)
def test_malformed_output_raises(output):
    with pytest.raises(GenerationError):
        GenerationResult.from_pipeline_output(output)
