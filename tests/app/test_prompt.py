# tests/app/test_prompt.py
from map_pins.io.prompt import ConsolePrompt, ScriptedPrompt


def test_scripted_prompt_uses_queue_then_default():
    p = ScriptedPrompt([False], default=True)
    assert p.confirm("first?") is False
    assert p.confirm("second?") is True
    p.notify("hello")
    assert p.asked == ["first?", "second?"]
    assert p.notices == ["hello"]


def test_console_prompt():
    replies = iter(["y", "  No "])
    out = []
    p = ConsolePrompt(input_fn=lambda msg: next(replies), output_fn=out.append)
    assert p.confirm("Save?") is True
    assert p.confirm("Delete?") is False
    p.notify("This marker already exists!")
    assert out == ["This marker already exists!"]
