from typing import Callable

from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.keys import Keys


def get_key_bindings(last_line: Callable[[], str]) -> KeyBindings:
    """Return KeyBindings that mirror the wire editing rules in the local prompt.

    Args:
        last_line: Returns the most recently accepted command line
    """
    kb = KeyBindings()

    @kb.add(Keys.Tab)
    def _(event: KeyPressEvent) -> None:
        """Accept the suggestion if there is one, otherwise insert a space."""
        buffer = event.current_buffer
        suggestion = buffer.suggestion
        if suggestion:
            buffer.insert_text(suggestion.text)
        else:
            buffer.insert_text(" ")

    @kb.add("c-d", eager=True)
    def _(event: KeyPressEvent) -> None:
        """Recall the previous command line when nothing has been typed."""
        buffer = event.current_buffer
        previous = last_line()
        if not buffer.text and previous:
            buffer.insert_text(previous)

    # Enter submits input
    @kb.add(Keys.Enter, eager=True)
    def _(event: KeyPressEvent) -> None:
        """Submit input on Enter"""
        event.current_buffer.validate_and_handle()

    return kb
